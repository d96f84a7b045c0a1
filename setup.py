from setuptools import setup, find_packages

setup(
    name="admissionsim",
    version="0.1.0",
    description="Fixed-timestep simulator for latency-goal admission control",
    author="adamfilli",
    packages=find_packages(include=["admissionsim", "admissionsim.*"]),
    install_requires=[
        "matplotlib",
        "numpy",
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,
    python_requires=">=3.11",
)

from setuptools import setup, find_namespace_packages

setup(
    name="ecsctl",
    version="0.1.0",
    description="Zero-downtime rolling updates between ECS services",
    packages=find_namespace_packages(where="src", include=["ecsctl", "ecsctl.*"]),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "pydantic>=2.0",
        "pyyaml>=6.0",
        "click>=8.0",
        "tenacity>=8.0",
        "python-dotenv>=1.0",
        "boto3>=1.26",
        "botocore>=1.29",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ecsctl=ecsctl.CLI.main:main",
        ],
    },
)

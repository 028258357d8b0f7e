import os
from setuptools import setup, find_packages

requirements = []
with open(os.path.join(os.path.dirname(__file__), "requirements.txt")) as f:
    requirements = [line for line in f.read().splitlines() if line and not line.startswith("#")]

test_requirements = []
with open(os.path.join(os.path.dirname(__file__), "requirements-test.txt")) as f:
    test_requirements = [line for line in f.read().splitlines() if line and not line.startswith("#")]


def read(fname):
    return open(os.path.join(os.path.dirname(__file__), fname)).read()


setup(
    name="fix-azure-storage",
    version="0.1.0",
    description="Staged definition and creation of Azure storage accounts",
    license="Apache 2.0",
    packages=find_packages(include=["fix_azure_storage", "fix_azure_storage.*"]),
    long_description=read("README.md"),
    long_description_content_type="text/markdown",
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={"test": test_requirements},
    classifiers=[
        # Current project status
        "Development Status :: 4 - Beta",
        # Audience
        "Intended Audience :: System Administrators",
        "Intended Audience :: Information Technology",
        # License information
        "License :: OSI Approved :: Apache Software License",
        # Supported python versions
        "Programming Language :: Python :: 3.9",
        # Supported OS's
        "Operating System :: POSIX :: Linux",
        "Operating System :: Unix",
        # Extra metadata
        "Natural Language :: English",
        "Topic :: Utilities",
    ],
    keywords="cloud azure storage",
)

from setuptools import setup, find_packages

setup(
    name="deepsearch",
    version="1.3",
    packages=find_packages(include=["deepsearch", "deepsearch.*"]),
    description="Search file names and contents below a directory, with dry-run search and replace.",
    python_requires=">=3.8",
    install_requires=[
        "rich",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "deepsearch=deepsearch.cli:main",
            "ds=deepsearch.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)

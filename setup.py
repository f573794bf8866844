"""Package setup for multifile_downloader."""

from setuptools import setup, find_packages

setup(
    name="multifile-downloader",
    version="1.0.0",
    description="Download every linked file of a chosen type from one or more web pages",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "beautifulsoup4>=4.12.0",
        "lxml>=5.0.0",
        "urllib3>=2.0.0",
        "tqdm>=4.66.0",
        "colorlog>=6.8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "multifile-downloader=multifile_downloader.cli:main",
        ],
    },
)

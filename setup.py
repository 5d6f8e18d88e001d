from setuptools import setup, find_packages

setup(
    name="speechstream",
    version="0.1.0",
    description="Streaming speech-to-text dictation with overlap stitching and hot word auto-send",
    author="",
    python_requires=">=3.10",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "rich>=12.5.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
        "aiohttp>=3.8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "speechstream=speechstream.main:main",
        ],
    },
)

# setup.py
from setuptools import setup, find_packages

setup(
    name="zenith",
    version="0.1.0",
    description="A personal expense tracker with verified spending analytics and a grounded AI coach",
    author="Your Name",
    author_email="you@example.com",
    url="https://github.com/yourusername/zenith",
    packages=find_packages(include=["zenith_tracker", "zenith_tracker.*"]),
    python_requires=">=3.10",
    install_requires=[
        "click>=8.0",
        "pyyaml>=5.3",
        "python-dotenv>=0.19",
        "huggingface_hub>=0.23",
        "mcp>=1.0,<2",
        "anyio>=3.6",

    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "zenith=zenith_tracker.cli:main",
            "zenith-mcp=zenith_tracker.mcp_server:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)

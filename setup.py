from setuptools import setup, find_packages

setup(
    name="patchwise",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pyyaml",
        "textual",
        "unidiff>=0.7.5",
        "rapidfuzz>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "patchwise=patchwise.cli:main",
        ],
    },
    description="Apply LLM-proposed diffs to drifted files with confidence scoring.",
)

from setuptools import setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="consoletap",
    version="0.1.0",
    description="Collect console logs and runtime errors from a CDP-debuggable browser tab",
    long_description=long_description,
    long_description_content_type="text/markdown",
    # Treat current directory as the consoletap package
    packages=['consoletap'],
    package_dir={'consoletap': '.'},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Debuggers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "playwright>=1.40.0",
        "requests>=2.31.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "consoletap=consoletap.cli:main",
        ],
    },
)

# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="dirsize",
    version="0.1.0",
    description="Recursive disk usage analysis with search, interactive browsing and snapshots",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["dirsize*"]),
    python_requires=">=3.9",
    install_requires=[
        "rich",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'dirsize=dirsize.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)

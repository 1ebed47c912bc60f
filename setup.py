"""
ZoneSweep Setup Configuration
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = ""
if readme_file.exists():
    long_description = readme_file.read_text(encoding="utf-8")

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_file.exists():
    requirements = [
        line.strip()
        for line in requirements_file.read_text(encoding="utf-8").splitlines()
        if line.strip() and not line.startswith("#")
    ]

setup(
    name="zonesweep",
    version="1.0.0",
    description="Audit nameservers for open DNS zone transfers (AXFR)",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["zonesweep.tests", "zonesweep.tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "Intended Audience :: Information Technology",
        "Topic :: Security",
        "Topic :: System :: Networking",
        "Topic :: Internet :: Name Service (DNS)",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
        "Environment :: Console",
    ],
    python_requires=">=3.11",
    install_requires=requirements or [
        "typer>=0.9.0",
        "rich>=13.0.0",
        "dnspython>=2.4.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "zonesweep=zonesweep.cli.main:main",
        ],
    },
    keywords=[
        "dns",
        "zone transfer",
        "axfr",
        "network security",
        "security tools",
        "network reconnaissance",
    ],
)

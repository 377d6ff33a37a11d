#!/usr/bin/env python3
"""
Setup configuration for DiskScore - physical disk health report
"""

from setuptools import setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="diskscore",
    version="1.0.0",
    author="Magnus Modig",
    author_email="kontakt@modigs-datahjelp.no",
    description="Console report of physical disks, partitions and a weighted health score",
    long_description=long_description,
    long_description_content_type="text/markdown",
    py_modules=[
        "config_manager",
        "device_provider",
        "disk_models",
        "disk_report",
        "health_score",
        "presenter",
        "report_logger",
    ],
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Operating System :: POSIX :: Linux",
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "Topic :: System :: Monitoring",
    ],
    python_requires=">=3.8",
    install_requires=[
        "pySMART>=1.2.0",
        "psutil>=5.9.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "dev": ["pytest>=6.0", "pytest-cov>=2.10"],
    },
    entry_points={
        "console_scripts": [
            "diskscore=disk_report:main",
        ],
    },
    keywords="smart disk health report partitions ssd hdd",
    zip_safe=False,
    platforms=["Linux"],
)

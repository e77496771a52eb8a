#!/usr/bin/env python3
"""
winimpsyms install script
=========================

Import symbol cross-referencer for COFF object files.
"""

from setuptools import setup, find_packages
import os

# 读取长描述
def read_long_description():
    here = os.path.abspath(os.path.dirname(__file__))
    try:
        with open(os.path.join(here, 'README.md'), 'r', encoding='utf-8') as f:
            return f.read()
    except FileNotFoundError:
        return "winimpsyms - cross-reference __imp_ symbols across COFF object files"

# 读取依赖
def read_requirements():
    here = os.path.abspath(os.path.dirname(__file__))
    try:
        with open(os.path.join(here, 'requirements.txt'), 'r', encoding='utf-8') as f:
            requirements = []
            for line in f:
                line = line.strip()
                if line and not line.startswith('#'):
                    requirements.append(line)
            return requirements
    except FileNotFoundError:
        return []

setup(
    name="winimpsyms",
    version="0.1.0",
    author="",
    author_email="",
    description="Locate definitions and references of import symbols across COFF object files",
    long_description=read_long_description(),
    long_description_content_type="text/markdown",

    # 包配置
    package_dir={"": "src"},
    packages=find_packages(where="src"),

    # 依赖
    install_requires=read_requirements(),
    extras_require={
        "test": ["pytest"],
    },

    # Python版本要求
    python_requires=">=3.8",

    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Debuggers",
        "Topic :: Software Development :: Compilers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS",
    ],

    # 命令行入口点
    entry_points={
        "console_scripts": [
            "winimpsyms=winimpsyms.main:main",
        ],
    },

    keywords="coff, objdump, linker, import symbols, relocations, cross reference",

    zip_safe=False,
)

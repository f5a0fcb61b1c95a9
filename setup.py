#!/usr/bin/env python3
"""
Setup script for the attestor registry and attestation verifier
"""

from setuptools import setup

setup(
    name="attestor-registry",
    version="1.0.0",
    description="Trusted attestor registry and attestation signature verification",
    package_dir={"": "src"},
    py_modules=[
        "attestation_encoder",
        "attestation_errors",
        "attestation_models",
        "attestation_verifier",
        "attestor_cli",
        "attestor_registry",
        "config",
        "config_manager",
        "logger_utils",
        "registry_events",
        "registry_store",
        "signature_recovery",
    ],
    install_requires=[
        "web3>=6.0.0,<7.0.0",
        "eth-abi>=4.0.0,<5.0.0",
        "eth-keys>=0.4.0,<0.6.0",
        "eth-utils>=2.0.0,<5.0.0",
        "eth-typing>=3.0.0,<5.0.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "attestor=attestor_cli:main",
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)

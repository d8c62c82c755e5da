#!/usr/bin/env python3
"""
Lending Platform Deployment Script
Compile contracts first using: npx hardhat compile
"""

from lending_deploy.cli import run

if __name__ == "__main__":
    run()

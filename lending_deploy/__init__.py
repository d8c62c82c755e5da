"""
Lending Platform Deployment Harness
Deploys mock tokens and the lending platform contract to an EVM network
"""

__version__ = "0.1.0"

"""
Allows running as: python -m lending_deploy
"""

from lending_deploy.cli import run

if __name__ == "__main__":
    run()

"""
Allows running the supervisor as a module:
    python -m devhost --module ./src/index.js --manifest ./companion/manifest.json
"""

from .main import run

if __name__ == "__main__":
    run()

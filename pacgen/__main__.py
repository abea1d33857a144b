"""支持 python -m pacgen"""

from .cli.main import app

if __name__ == "__main__":
    app()

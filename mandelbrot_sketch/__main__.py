"""
Allow running the package directly: python -m mandelbrot_sketch
"""
from .cli import main

if __name__ == "__main__":
    main()

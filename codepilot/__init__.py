"""CodePilot - AI assistance backend for a browser code editor"""

__version__ = "1.0.0"

"""
SYMSEQ Command-Line Interface
"""

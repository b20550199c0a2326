"""
SYMSEQ Core Module

Configuration, logging, exceptions and shared record types.
"""

"""
API Module - HTTP interface for the statement extractor.
"""

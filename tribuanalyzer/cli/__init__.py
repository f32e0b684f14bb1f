"""
Command-line interface for TribuAnalyzer
"""

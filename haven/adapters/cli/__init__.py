"""
Typer command line interface
"""

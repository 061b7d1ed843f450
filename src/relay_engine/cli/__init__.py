"""Command line interface"""
from .commands import cli


def main():
    cli()

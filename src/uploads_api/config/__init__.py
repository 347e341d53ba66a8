"""
Configuration management for the Uploads API.

Contains the Pydantic settings class and the cached accessor used by the app
factory and the CLI.
"""

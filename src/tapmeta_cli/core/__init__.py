"""Core build metadata resolution and build execution."""

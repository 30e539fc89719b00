"""
App Factory

Describe an application in plain language, let a generative-AI model write its
source files, and watch a simulated build pipeline package it.
"""

__version__ = "1.0.0"

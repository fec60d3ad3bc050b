"""
Parsers, the heat-transfer engine and its exports.
"""

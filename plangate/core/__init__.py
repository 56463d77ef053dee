"""
plangate core: data model, exceptions, plan text parsing.
"""

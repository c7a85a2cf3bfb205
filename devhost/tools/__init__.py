"""
Standalone helper tools shipped with DevHost.
"""

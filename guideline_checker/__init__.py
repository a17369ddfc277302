"""
App Store guidelines checker package.
"""

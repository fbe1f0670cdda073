"""
Surtidores API - crowd-sourced fuel prices and station moderation
"""

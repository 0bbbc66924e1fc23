"""
EMS directory backend
"""

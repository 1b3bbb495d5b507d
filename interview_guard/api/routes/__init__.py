"""Route modules"""

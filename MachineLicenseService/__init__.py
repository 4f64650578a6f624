"""
Machine License Service Django project.
"""

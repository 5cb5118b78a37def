"""
Careers App

Job listings published by the administrator and the applications
submitted against them.
"""

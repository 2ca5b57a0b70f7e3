"""
MoveMate Backend — Repository Layer
====================================

What:  Database access for the services. Each repository wraps one
       AsyncSession and is built per HTTP request by a route dependency.
"""

# backend/mashboard/__init__.py

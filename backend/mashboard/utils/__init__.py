# backend/mashboard/utils/__init__.py

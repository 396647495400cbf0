"""
peer_recognition/orm/base.py
Declarative base for the SQL document store
"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

"""
peer_recognition
Peer recognition API: chapters, contributions, point distributions, results
"""
__version__ = "1.0.0"

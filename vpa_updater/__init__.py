"""
VPA Updater
Ranks pods with stale resource requests and evicts them within a disruption budget
"""

__version__ = "0.1.0"

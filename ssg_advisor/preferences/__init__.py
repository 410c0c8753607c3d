"""
Per-user SSG preference management.

Modules
-------
manager : UserPreferenceManager: validated profile mutations, each applied
          as one atomic read-modify-write in the store.
"""

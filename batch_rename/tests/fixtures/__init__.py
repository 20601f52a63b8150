"""Stand-in rename commands used by the tests.

Each script receives the file name to rename as its last argument.
"""

"""
Browse query engine.

- rules.py: clauses and sort key shared by both paths
- compiler.py: BrowseRequest -> SQL + bound params
- store_path.py: run the compiled query (aiosqlite) and apply the regex
- memory_path.py: run the same request over in-memory records
"""

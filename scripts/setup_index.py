"""
Create the search index if needed and upload every file in INGEST_DATA_DIR.

Equivalent to the `search-bot-setup-index` console script.
"""

from search_bot.indexers.jobs import setup_main

if __name__ == "__main__":
    setup_main()

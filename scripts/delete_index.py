"""
Delete the search index named by AZURE_SEARCH_INDEX_NAME.

Equivalent to the `search-bot-delete-index` console script.
"""

from search_bot.indexers.jobs import delete_main

if __name__ == "__main__":
    delete_main()

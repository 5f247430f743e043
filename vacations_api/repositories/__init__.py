"""
Persistence adapters.

Services reach the JSON document through get_store() and the collection API
in json_storage instead of opening the data file themselves.
"""

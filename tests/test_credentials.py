from petfinder_mcp.credentials import extract_credentials


def test_headers_are_case_insensitive():
    creds = extract_credentials({"X-Petfinder-Client-Id": "abc", "X-PETFINDER-CLIENT-SECRET": "xyz"})
    assert creds.client_id == "abc"
    assert creds.client_secret == "xyz"


def test_missing_secret_returns_none():
    assert extract_credentials({"x-petfinder-client-id": "abc"}) is None


def test_blank_values_are_missing():
    assert extract_credentials({"x-petfinder-client-id": " ", "x-petfinder-client-secret": "xyz"}) is None


def test_query_parameters_fill_in_missing_headers():
    creds = extract_credentials(
        {"x-petfinder-client-id": "from-header"},
        {"petfinder_client_id": "from-query", "petfinder_client_secret": "query-secret"},
    )
    assert creds.client_id == "from-header"
    assert creds.client_secret == "query-secret"


def test_no_metadata():
    assert extract_credentials({}, {}) is None

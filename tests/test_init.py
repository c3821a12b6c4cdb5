def test_import():
    """Test that the package can be imported without circular import issues."""
    import simpleforce

    assert hasattr(simpleforce, "SalesforceClient")
    assert hasattr(simpleforce, "SObject")
    assert hasattr(simpleforce, "QueryResult")
    assert hasattr(simpleforce, "classify_error")
    assert hasattr(simpleforce, "is_retryable")
    assert simpleforce.DEFAULT_API_VERSION == "43.0"
    assert simpleforce.DEFAULT_CLIENT_ID == "simpleforce"

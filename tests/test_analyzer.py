import pytest

from gois.analyzer import Analyzer, DomainInfo, QueryResult

REGISTERED_TEXT = (
    "Domain Name: EXAMPLE.COM\n"
    "Registrar: Example Registrar, Inc.\n"
    "Creation Date: 1995-08-14T04:00:00Z\n"
    "Registry Expiry Date: 2030-08-13T04:00:00Z\n"
    "Name Server: NS1.EXAMPLE.COM\n"
    "Name Server: ns1.example.com\n"
    "Name Server: NS2.EXAMPLE.COM\n"
    "DNSSEC: unsigned\n"
)


@pytest.fixture
def analyzer():
    return Analyzer()


def test_none_result(analyzer):
    assert analyzer.get_domain_status(None) == "unknown"
    assert analyzer.extract_registrar(None) == ""
    assert analyzer.extract_creation_date(None) == ""
    assert analyzer.extract_expiration_date(None) == ""
    assert analyzer.extract_name_servers(None) == []


def test_empty_result_is_unknown(analyzer):
    assert analyzer.get_domain_status(QueryResult("  ", "\n")) == "unknown"


@pytest.mark.parametrize(
    "text",
    [
        "No match for \"FREEDOMAIN.COM\".",
        "Domain not found.",
        "NOT FOUND",
        "未找到该域名",
        "The domain is available",
    ],
)
def test_available(analyzer, text):
    assert analyzer.get_domain_status(QueryResult(registry_result=text)) == "available"


def test_registered(analyzer):
    assert analyzer.get_domain_status(QueryResult(REGISTERED_TEXT)) == "registered"


def test_registrar_answer_counts_for_status(analyzer):
    result = QueryResult(registry_result="", registrar_result="Registrant: someone")
    assert analyzer.get_domain_status(result) == "registered"


def test_both_keywords_prefers_registered(analyzer):
    text = "No match for domain\nDomain Status: clientHold"
    assert analyzer.get_domain_status(QueryResult(text)) == "registered"


def test_no_keywords_is_unknown(analyzer):
    assert analyzer.get_domain_status(QueryResult("rate limit exceeded")) == "unknown"


def test_extract_fields(analyzer):
    result = QueryResult(REGISTERED_TEXT)
    assert analyzer.extract_registrar(result) == "Example Registrar, Inc."
    assert analyzer.extract_creation_date(result) == "1995-08-14T04:00:00Z"
    assert analyzer.extract_expiration_date(result) == "2030-08-13T04:00:00Z"


def test_registrar_answer_searched_first(analyzer):
    result = QueryResult(
        registry_result="Registrar: From Registry",
        registrar_result="Registrar: From Registrar",
    )
    assert analyzer.extract_registrar(result) == "From Registrar"


def test_alternative_date_labels(analyzer):
    result = QueryResult("created: 2001-01-01\nexpires: 2031-01-01\n")
    assert analyzer.extract_creation_date(result) == "2001-01-01"
    assert analyzer.extract_expiration_date(result) == "2031-01-01"


def test_missing_fields_are_empty(analyzer):
    result = QueryResult("nothing useful here")
    assert analyzer.extract_registrar(result) == ""
    assert analyzer.extract_creation_date(result) == ""
    assert analyzer.extract_name_servers(result) == []


def test_name_servers_deduplicated_in_order(analyzer):
    result = QueryResult(REGISTERED_TEXT)
    assert analyzer.extract_name_servers(result) == ["NS1.EXAMPLE.COM", "NS2.EXAMPLE.COM"]


def test_name_servers_from_all_labels(analyzer):
    result = QueryResult("nserver: a.example.net\nnameserver: b.example.net\n")
    servers = analyzer.extract_name_servers(result)
    assert sorted(servers) == ["a.example.net", "b.example.net"]


def test_get_domain_info_matches_parts(analyzer):
    result = QueryResult(REGISTERED_TEXT)
    info = analyzer.get_domain_info(result)
    assert isinstance(info, DomainInfo)
    assert info.status == analyzer.get_domain_status(result)
    assert info.registrar == analyzer.extract_registrar(result)
    assert info.creation_date == analyzer.extract_creation_date(result)
    assert info.expiration_date == analyzer.extract_expiration_date(result)
    assert info.name_servers == analyzer.extract_name_servers(result)


def test_get_domain_info_for_none(analyzer):
    info = analyzer.get_domain_info(None)
    assert info == DomainInfo(status="unknown")
from urllib3 import exceptions as urllib3_exc

from politecrawler.net import HttpClient
from politecrawler.politeness import PolitenessRegistry


class FakeResponse:
    def __init__(self, status, headers, data):
        self.status = status
        self.headers = headers
        self.data = data


def client_returning(response):
    client = HttpClient("test-agent")
    calls = []

    def request(method, url, **kwargs):
        calls.append((method, url, kwargs))
        if isinstance(response, Exception):
            raise response
        return response

    client.http.request = request
    return client, calls


def test_fetch_decodes_body_for_any_content_type():
    body = b"User-agent: *\nCrawl-delay: 7\n"
    client, calls = client_returning(FakeResponse(200, {"Content-Type": "application/octet-stream"}, body))
    res = client.fetch("http://a.com/robots.txt")
    assert res.status == 200
    assert res.content_type == "application/octet-stream"
    assert res.text == body.decode()
    assert res.size_bytes == len(body)
    assert calls[0][2]["redirect"] is False


def test_octet_stream_robots_txt_still_sets_crawl_delay():
    body = b"User-agent: *\nCrawl-delay: 7\n"
    client, _ = client_returning(FakeResponse(200, {"Content-Type": "application/octet-stream"}, body))
    reg = PolitenessRegistry(client, default_delay=1.0)
    assert reg.ensure_delay_known("http", "a.com") == 7.0


def test_fetch_exposes_location_header():
    client, _ = client_returning(FakeResponse(302, {"Content-Type": "text/html", "Location": "/next"}, b""))
    res = client.fetch("http://a.com/old")
    assert res.status == 302
    assert res.location == "/next"


def test_fetch_returns_none_on_transport_error():
    client, _ = client_returning(urllib3_exc.ProtocolError("connection reset"))
    assert client.fetch("http://a.com/") is None

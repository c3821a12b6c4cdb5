from collections.abc import Callable

import httpx
import pytest

from simpleforce.client import SalesforceClient

INSTANCE_URL = "https://na1.salesforce.com"
SESSION_ID = "00D000000000001!SESSION"

Handler = Callable[[httpx.Request], httpx.Response]


class RequestLog(list[httpx.Request]):
    """Requests seen by a mock transport, in arrival order"""

    @property
    def urls(self) -> list[str]:
        return [str(request.url) for request in self]


@pytest.fixture
def request_log() -> RequestLog:
    return RequestLog()


@pytest.fixture
def make_client(request_log: RequestLog):
    """
    Builds SalesforceClients whose HTTP traffic goes to ``handler``.

    Pass ``authenticated=False`` for a client that has not logged in yet.
    """
    clients: list[SalesforceClient] = []

    def _make(
        handler: Handler, authenticated: bool = True, **kwargs
    ) -> SalesforceClient:
        def _recording_handler(request: httpx.Request) -> httpx.Response:
            request_log.append(request)
            return handler(request)

        if authenticated:
            kwargs.setdefault("session_id", SESSION_ID)
            kwargs.setdefault("instance_url", INSTANCE_URL)
        client = SalesforceClient(
            transport=httpx.MockTransport(_recording_handler), **kwargs
        )
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()


@pytest.fixture
def unreachable() -> Handler:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"Unexpected request {request.method} {request.url}")

    return _handler


LOGIN_RESPONSE = b"""<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/"
                  xmlns="urn:partner.soap.sforce.com"
                  xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
    <soapenv:Body>
        <loginResponse>
            <result>
                <metadataServerUrl>https://na1.salesforce.com/services/Soap/m/43.0/00D000000000001</metadataServerUrl>
                <passwordExpired>false</passwordExpired>
                <sandbox>false</sandbox>
                <serverUrl>https://na1.salesforce.com/services/Soap/u/43.0/00D000000000001</serverUrl>
                <sessionId>00D000000000001!AQ0AQFakeSession</sessionId>
                <userId>005000000000001AAA</userId>
                <userInfo>
                    <userEmail>jane@example.com</userEmail>
                    <userFullName>Jane Doe</userFullName>
                    <userName>jane@example.com.dev</userName>
                </userInfo>
            </result>
        </loginResponse>
    </soapenv:Body>
</soapenv:Envelope>"""

SOAP_FAULT = b"""<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/"
                  xmlns:sf="urn:fault.partner.soap.sforce.com">
    <soapenv:Body>
        <soapenv:Fault>
            <faultcode>sf:INVALID_LOGIN</faultcode>
            <faultstring>INVALID_LOGIN: Invalid username, password, security token; or user locked out.</faultstring>
            <detail>
                <sf:LoginFault>
                    <sf:exceptionCode>INVALID_LOGIN</sf:exceptionCode>
                </sf:LoginFault>
            </detail>
        </soapenv:Fault>
    </soapenv:Body>
</soapenv:Envelope>"""


@pytest.fixture
def login_response_xml() -> bytes:
    return LOGIN_RESPONSE


@pytest.fixture
def soap_fault_xml() -> bytes:
    return SOAP_FAULT

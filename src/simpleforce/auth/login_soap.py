"""SOAP partner API login: request envelope and response parsing."""

from html import escape

import httpx
import lxml.etree as etree

from .types import LoginResult, UserInfo
from ..exceptions import SalesforceGeneralError

XML_NS = "sf"

LOGIN_ENVELOPE = """<?xml version="1.0" encoding="utf-8" ?>
<env:Envelope
        xmlns:xsd="http://www.w3.org/2001/XMLSchema"
        xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
        xmlns:env="http://schemas.xmlsoap.org/soap/envelope/"
        xmlns:urn="urn:partner.soap.sforce.com">
    <env:Header>
        <urn:CallOptions>
            <urn:client>{client_id}</urn:client>
            <urn:defaultNamespace>{namespace}</urn:defaultNamespace>
        </urn:CallOptions>
    </env:Header>
    <env:Body>
        <n1:login xmlns:n1="urn:partner.soap.sforce.com">
            <n1:username>{username}</n1:username>
            <n1:password>{password}{security_token}</n1:password>
        </n1:login>
    </env:Body>
</env:Envelope>"""


def get_xml_element_value(root: etree._Element, path: str) -> str | None:
    """
    Returns the text of the first element matching ``path``, where each step
    of the path matches in any namespace.

    For example ``get_xml_element_value(root, "userInfo/userEmail")``
    """
    xpath = ".//" + "/".join(f"{{*}}{step}" for step in path.split("/"))
    element = root.find(xpath)
    if element is not None and element.text:
        return element.text
    return None


def login_request_body(
    client_id: str, username: str, password: str, security_token: str = ""
) -> str:
    # security_token may be empty when logging in from a trusted network
    return LOGIN_ENVELOPE.format(
        client_id=escape(client_id),
        namespace=XML_NS,
        username=escape(username),
        password=escape(password),
        security_token=escape(security_token),
    )


def login_request(
    base_url: str,
    api_version: str,
    client_id: str,
    username: str,
    password: str,
    security_token: str = "",
) -> httpx.Request:
    return httpx.Request(
        "POST",
        f"{base_url.rstrip('/')}/services/Soap/u/{api_version}",
        content=login_request_body(client_id, username, password, security_token),
        headers={
            "Content-Type": "text/xml",
            "charset": "UTF-8",
            "SOAPAction": "login",
        },
    )


def parse_login_response(content: bytes | str) -> LoginResult:
    if isinstance(content, str):
        content = content.encode("utf-8")
    try:
        root = etree.fromstring(content)
    except etree.XMLSyntaxError as e:
        raise SalesforceGeneralError(f"Unable to parse login response: {e}") from e

    result = root.find(".//{*}loginResponse/{*}result")
    if result is None:
        raise SalesforceGeneralError("Login response has no loginResponse result")

    session_id = get_xml_element_value(result, "sessionId")
    server_url = get_xml_element_value(result, "serverUrl")
    if not session_id:
        raise SalesforceGeneralError("Unable to find Session ID in login response")
    if not server_url:
        raise SalesforceGeneralError("Unable to find Server URL in login response")

    return LoginResult(
        session_id=session_id,
        server_url=server_url,
        user=UserInfo(
            id=get_xml_element_value(result, "userId") or "",
            name=get_xml_element_value(result, "userInfo/userName") or "",
            full_name=get_xml_element_value(result, "userInfo/userFullName") or "",
            email=get_xml_element_value(result, "userInfo/userEmail") or "",
        ),
    )


def instance_url_from_server_url(server_url: str) -> str:
    """Reduce a SOAP ``serverUrl`` to ``scheme://host[:port]``"""
    try:
        url = httpx.URL(server_url)
    except httpx.InvalidURL as e:
        raise SalesforceGeneralError(f"Unable to parse server URL {server_url!r}") from e
    if not url.scheme or not url.host:
        raise SalesforceGeneralError(f"Unable to parse server URL {server_url!r}")
    netloc = url.netloc.decode("ascii")
    return f"{url.scheme}://{netloc}"

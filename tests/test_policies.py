from abxpolicy.policies import decode_xml, get_policy_list, parse_xml, read_policy_list
from abxpolicy.protocol import XML_HEADER

from abx_stream import user_profile


def test_only_restrictions_after_restrictions_user():
    xml = (
        f"{XML_HEADER}<user><restrictions no_debugging_features=\"true\"></restrictions>"
        "<restrictions_user><restrictions no_sms=\"true\" no_usb_file_transfer=\"true\">"
        "</restrictions></restrictions_user></user>"
    )
    assert get_policy_list(xml) == ["no_sms", "no_usb_file_transfer"]


def test_nothing_before_restrictions_user():
    xml = f'{XML_HEADER}<user><restrictions no_sms="true"></restrictions></user>'
    assert get_policy_list(xml) == []


def test_truncated_document_is_recovered():
    xml = f'{XML_HEADER}<user><restrictions_user><restrictions no_sms="true"></restrictions><bad x="'
    assert get_policy_list(xml) == ["no_sms"]


def test_empty_input():
    assert get_policy_list("") == []


def test_read_policy_list_from_file(tmp_path):
    path = tmp_path / "0.xml"
    path.write_bytes(user_profile(policies=("no_sms", "no_camera")))
    assert read_policy_list(path) == ["no_sms", "no_camera"]
    assert decode_xml(path).startswith(f"{XML_HEADER}<user id=\"0\" name=\"Owner\">")


def test_external_entities_are_not_expanded(tmp_path):
    secret = tmp_path / "secret.txt"
    secret.write_text("top-secret-value")
    xml = (
        f'{XML_HEADER}<!DOCTYPE user [<!ENTITY leak SYSTEM "{secret.as_uri()}">]>'
        '<user><restrictions_user><restrictions no_sms="true"></restrictions>'
        "<note>&leak;</note></restrictions_user></user>"
    )
    root = parse_xml(xml)
    assert "top-secret-value" not in "".join(root.itertext())
    assert get_policy_list(xml) == ["no_sms"]

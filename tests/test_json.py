import json
import pytest
import sensorlink


def test_json_encode_and_decode():
    encode_and_decode(json.dumps, json.loads, dump_is_bytes=False)


def test_sensorlink_encode_and_decode():
    encode_and_decode(sensorlink.json.dumps, sensorlink.json.loads)


def encode_and_decode(dumps, loads, dump_is_bytes=True):

    input_dictionary = dict()
    input_dictionary['list'] = [1, 2, 3, 'a', 'b', None, 'c', 'z']
    input_dictionary['values'] = [0.5, -1.25, 1e-3]
    input_dictionary['none'] = None
    input_dictionary['true'] = True
    input_dictionary['false'] = False
    input_dictionary['endTimestamp'] = -1

    encoded = dumps(input_dictionary)

    if dump_is_bytes:
        assert isinstance(encoded, bytes)
    else:
        assert isinstance(encoded, str)

    # It won't do to compare the encoded JSON against a pre-set notion of
    # what the encoded output should look like, as there is variance in
    # the handling of whitespace between JSON libraries.

    decoded = loads(encoded)
    assert decoded == input_dictionary

    # Either form of the encoded JSON can be decoded.

    if dump_is_bytes:
        assert loads(encoded.decode()) == input_dictionary


def test_decode_errors():

    for bad in (None, b'', b'{', 'not json'):
        with pytest.raises(sensorlink.json.JSONDecodeError):
            sensorlink.json.loads(bad)

        with pytest.raises(ValueError):
            sensorlink.json.loads(bad)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

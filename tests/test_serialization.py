from __future__ import annotations

import datetime

import pytest

from sdpkit import (
    Attribute,
    Bandwidth,
    Connection,
    Key,
    MediaDirection,
    MediaType,
    Repeat,
    TimeZone,
    encode,
    new_session,
    parse,
)
from sdpkit.exceptions import SDPParseError, SDPUnknownFieldError, SDPUnsupportedVersion

from .conftest import ALL_SAMPLES, SIMPLE_OFFER, parse_session


def make_sdp(*lines: str) -> bytes:
    return "\r\n".join(("v=0", "o=- 1 1 IN IP4 10.0.0.1", "s=-", *lines)).encode() + b"\r\n"


class TestParse:
    def test_simple_offer(self, simple_offer):
        assert simple_offer.version == 0
        assert simple_offer.origin.session_id == 2508
        assert simple_offer.origin.session_version == 1
        assert simple_offer.origin.address == "192.168.1.2"
        assert simple_offer.name == "sipclientgo/1.0"
        assert simple_offer.connection == Connection("IN", "IP4", "192.168.1.2")
        assert simple_offer.timing.start is None and simple_offer.timing.stop is None

        audio = simple_offer.get_audio_media_flow()
        assert audio.type is MediaType.AUDIO
        assert audio.port == 51191
        assert audio.protocol == "RTP/AVP"
        assert [media_format.payload for media_format in audio.formats] == [9, 8, 0, 101]
        assert audio.format_names() == ["G722", "PCMA", "PCMU", "telephone-event"]
        assert audio.find_format_by_payload(9).channels == 3
        assert audio.find_format_by_payload(101).channels == 1
        assert audio.find_format_by_payload(101).params == ["0-16"]
        assert audio.mode is MediaDirection.SENDONLY
        assert audio.attributes == [Attribute("ssrc", "7345055")]

    def test_session_and_media_level(self, answerer_session):
        assert answerer_session.ptime == "40"
        assert answerer_session.mode is MediaDirection.UNSPECIFIED
        assert answerer_session.bandwidth == [Bandwidth("CT", 1000)]
        audio = answerer_session.get_audio_media_flow()
        assert audio.ptime == "20"
        assert audio.mode is MediaDirection.SENDRECV
        assert audio.connections == [Connection("IN", "IP4", "0.0.0.0")]
        assert audio.attributes == [Attribute("rtcp", "51625"), Attribute("label", "Audio")]

    def test_non_rtp_media(self, multimedia_offer):
        application = multimedia_offer.get_media_flow(MediaType.APPLICATION)
        assert application.protocol == "DTLS/SCTP"
        assert application.formats == []
        assert application.format_description == "5000"
        assert not application.is_rtp
        assert multimedia_offer.get_media_flow("video").is_rtp

    def test_webrtc_offer(self, webrtc_offer):
        audio = webrtc_offer.get_audio_media_flow()
        assert audio.protocol == "UDP/TLS/RTP/SAVPF"
        assert audio.port == 9
        assert audio.find_format_by_payload(111).feedback == ["transport-cc"]
        assert audio.find_format_by_payload(111).params == ["minptime=10;useinbandfec=1"]
        assert audio.find_format_by_payload(63).params == ["111/111"]
        assert audio.find_format_by_payload(110).clock_rate == 48000
        assert audio.find_format_by_name("TELEPHONE-EVENT").payload == 110
        assert Attribute("rtcp-mux") in audio.attributes
        assert webrtc_offer.attributes[0] == Attribute("group", "BUNDLE 0")

    def test_unknown_media_type(self):
        raw = make_sdp("t=0 0", "m=3d 5000 RTP/AVP 96", "a=rtpmap:96 foo/90000")
        session, warnings = parse(raw)
        assert warnings == []
        assert session.media[0].type == "3d"
        assert session.media[0].formats == []
        assert session.media[0].format_description == "96"
        assert session.media[0].attributes == [Attribute("rtpmap", "96 foo/90000")]
        assert session.get_media_flow("3d") is session.media[0]

    def test_wildcard_feedback(self):
        session, _ = parse(
            make_sdp(
                "t=0 0", "m=video 5000 RTP/AVPF 96", "a=rtpmap:96 VP8/90000", "a=rtcp-fb:* nack"
            )
        )
        video = session.get_media_flow(MediaType.VIDEO)
        assert video.formats[0].feedback == []
        assert video.attributes == [Attribute("rtcp-fb", "* nack")]

    def test_attribute_for_unlisted_payload(self):
        session, warnings = parse(
            make_sdp(
                "t=0 0", "m=audio 5000 RTP/AVP 0", "a=rtpmap:0 PCMU/8000", "a=fmtp:18 annexb=no"
            )
        )
        assert len(warnings) == 1
        assert "18" in warnings[0]
        assert session.media[0].attributes == [Attribute("fmtp", "18 annexb=no")]

    def test_repeated_payload_type(self):
        session, warnings = parse(
            make_sdp("t=0 0", "m=audio 4000 RTP/AVP 0 8 0", "a=rtpmap:0 PCMU/8000")
        )
        audio = session.get_audio_media_flow()
        assert [media_format.payload for media_format in audio.formats] == [0, 8]
        assert audio.find_format_by_payload(0).name == "PCMU"
        assert len(warnings) == 1
        assert b"m=audio 4000 RTP/AVP 0 8\r\n" in encode(session)

    def test_static_payload_without_rtpmap(self):
        session, _ = parse(make_sdp("t=0 0", "m=audio 5000 RTP/AVP 0 8"))
        assert session.media[0].format_names() == ["", ""]
        session.restore_missing_rtpmaps()
        assert session.media[0].format_names() == ["PCMU", "PCMA"]

    def test_time_fields(self):
        session, _ = parse(
            make_sdp(
                "t=3034423619 3042462419",
                "r=7d 1h 0 25h",
                "z=2882844526 -1h 2898848070 0",
                "k=uri:https://keys.example.com/key",
            )
        )
        assert session.timing.start == datetime.datetime(
            1996, 2, 27, 15, 26, 59, tzinfo=datetime.timezone.utc
        )
        assert session.timing.stop - session.timing.start == datetime.timedelta(days=93, hours=1)
        assert session.repeat == [
            Repeat(
                interval=datetime.timedelta(days=7),
                duration=datetime.timedelta(hours=1),
                offsets=[datetime.timedelta(0), datetime.timedelta(hours=25)],
            )
        ]
        assert [timezone.offset for timezone in session.timezones] == [
            datetime.timedelta(hours=-1),
            datetime.timedelta(0),
        ]
        assert isinstance(session.timezones[0], TimeZone)
        assert session.keys == [Key("uri", "https://keys.example.com/key")]

    def test_additional_timing_ignored(self):
        session, warnings = parse(make_sdp("t=0 0", "t=3034423619 3042462419"))
        assert session.timing.start is None
        assert len(warnings) == 1

    @pytest.mark.parametrize(
        "raw_value, ttl, address_count",
        [
            ("IN IP4 224.2.1.1/127", 127, None),
            ("IN IP4 224.2.1.1/127/3", 127, 3),
            ("IN IP6 ff15::101/3", None, 3),
            ("IN IP4 10.0.0.1", None, None),
        ],
    )
    def test_connection_address(self, raw_value, ttl, address_count):
        connection = Connection.from_raw_value(raw_value)
        assert connection.ttl == ttl
        assert connection.address_count == address_count
        assert connection.serialize() == raw_value

    def test_parse_str(self):
        assert parse(SIMPLE_OFFER.decode())[0] == parse_session(SIMPLE_OFFER)


class TestParseErrors:
    def test_unknown_lines(self):
        raw = make_sdp("t=0 0", "x=something", "m=audio 5000 RTP/AVP 0", "y=other")
        session, warnings = parse(raw)
        assert len(warnings) == 2
        assert len(session.media) == 1
        with pytest.raises(SDPUnknownFieldError):
            parse(raw, strict=True)

    def test_unsupported_version(self):
        with pytest.raises(SDPUnsupportedVersion):
            parse(b"v=1\r\no=- 1 1 IN IP4 10.0.0.1\r\ns=-\r\nt=0 0\r\n")

    @pytest.mark.parametrize(
        "raw",
        [
            b"",
            b"o=- 1 1 IN IP4 10.0.0.1\r\nv=0\r\n",
            b"v=zero\r\n",
            make_sdp("t=0 0", "not an sdp line"),
            make_sdp("t=0 0", "m=audio port RTP/AVP 0"),
            make_sdp("t=0 0", "m=audio 5000 RTP/AVP PCMU"),
            make_sdp("t=0 0", "m=audio 5000 RTP/AVP 0 128"),
            make_sdp("t=0 0", "m=audio 5000 RTP/AVP 0", "a=rtpmap:x PCMU/8000"),
            make_sdp("t=0 0", "m=audio 5000 RTP/AVP 0", "a=rtpmap:0 PCMU/fast"),
            make_sdp("t=0", "m=audio 5000 RTP/AVP 0"),
            make_sdp("t=0 0", "c=IN IP4"),
            make_sdp("t=0 0", "b=AS"),
            make_sdp("t=0 0", "z=2882844526"),
            make_sdp("t=0 0", "r=7x 1h"),
        ],
    )
    def test_malformed(self, raw):
        with pytest.raises(SDPParseError):
            parse(raw)

    @pytest.mark.parametrize(
        "raw",
        [
            b"v=0\r\no=- 1 1 IN IP4 10.0.0.1\r\ns=\xff\xfe\r\nt=0 0\r\n",
            make_sdp("t=999999999999999999 0"),
            make_sdp("t=0 0", "z=999999999999999999 -1h"),
            make_sdp("t=0 0", "r=999999999999999999d 1h"),
        ],
        ids=["invalid-utf8", "timing-overflow", "timezone-overflow", "repeat-overflow"],
    )
    def test_undecodable(self, raw):
        with pytest.raises(SDPParseError):
            parse(raw)

    def test_malformed_origin(self):
        with pytest.raises(SDPParseError):
            parse(b"v=0\r\no=- 1 IN IP4 10.0.0.1\r\ns=-\r\nt=0 0\r\n")

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse(b"v=0\r\ngarbage\r\n")


class TestEncode:
    @pytest.mark.parametrize("raw", ALL_SAMPLES)
    def test_encode_parse(self, raw):
        session = parse_session(raw)
        encoded = encode(session)
        assert parse_session(encoded) == session
        assert encode(parse_session(encoded)) == encoded

    def test_crlf(self, simple_offer):
        encoded = encode(simple_offer)
        assert encoded.endswith(b"\r\n")
        assert b"\n" not in encoded.replace(b"\r\n", b"")

    def test_simple_offer(self, simple_offer):
        assert encode(simple_offer).decode().split("\r\n") == [
            "v=0",
            "o=- 2508 1 IN IP4 192.168.1.2",
            "s=sipclientgo/1.0",
            "c=IN IP4 192.168.1.2",
            "t=0 0",
            "m=audio 51191 RTP/AVP 9 8 0 101",
            "a=rtpmap:9 G722/8000/3",
            "a=rtpmap:8 PCMA/8000/2",
            "a=rtpmap:0 PCMU/8000",
            "a=rtpmap:101 telephone-event/8000",
            "a=fmtp:101 0-16",
            "a=ssrc:7345055",
            "a=sendonly",
            "",
        ]

    def test_new_session(self):
        session = new_session(7, 3, "10.0.0.2", "", "", MediaDirection.RECVONLY, 5004, [0, 101])
        assert encode(session).decode().split("\r\n") == [
            "v=0",
            "o=- 7 3 IN IP4 10.0.0.2",
            "s= ",
            "c=IN IP4 10.0.0.2",
            "t=0 0",
            "m=audio 5004 RTP/AVP 0 101",
            "a=rtpmap:0 PCMU/8000",
            "a=rtpmap:101 telephone-event/8000",
            "a=fmtp:101 0-16",
            "a=ptime:20",
            "a=recvonly",
            "",
        ]

    def test_time_fields(self):
        raw = make_sdp(
            "t=3034423619 3042462419", "r=604800 3600 0 90000", "z=2882844526 -3600 2898848070 0"
        )
        session, _ = parse(raw)
        lines = encode(session).decode().split("\r\n")
        assert "t=3034423619 3042462419" in lines
        assert "r=7d 1h 0 25h" in lines
        assert "z=2882844526 -1h 2898848070 0" in lines

    def test_disabled_flow(self, multimedia_offer):
        multimedia_offer.disable_flows(MediaType.APPLICATION)
        assert b"m=application 0 DTLS/SCTP 5000\r\n" in encode(multimedia_offer)

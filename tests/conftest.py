from __future__ import annotations

import pytest

from sdpkit import Session, parse


SIMPLE_OFFER = b"""v=0
o=- 2508 1 IN IP4 192.168.1.2
s=sipclientgo/1.0
c=IN IP4 192.168.1.2
t=0 0
m=audio 51191 RTP/AVP 9 8 0 101
a=rtpmap:9 G722/8000/3
a=rtpmap:8 PCMA/8000/2
a=rtpmap:0 PCMU/8000/1
a=rtpmap:101 telephone-event/8000
a=fmtp:101 0-16
a=sendonly
a=ssrc:7345055
"""

MULTIMEDIA_OFFER = b"""v=0
o=- 3849203748 3849203748 IN IP4 192.0.2.1
s=Multimedia Session Example
t=0 0
a=group:BUNDLE audio video data
a=msid-semantic: WMS myStream
c=IN IP4 203.0.113.1
m=audio 49170 RTP/AVP 0 96
c=IN IP4 203.0.113.2
a=rtpmap:0 PCMU/8000
a=rtpmap:96 opus/48000/2
a=fmtp:96 minptime=10;useinbandfec=1
a=sendrecv
a=mid:audio
a=ssrc:1001 cname:audioCname
m=video 51372 RTP/AVP 97 98
c=IN IP4 203.0.113.3
a=rtpmap:97 H264/90000
a=rtpmap:98 VP8/90000
a=fmtp:97 profile-level-id=42e01f;packetization-mode=1
a=sendrecv
a=mid:video
a=ssrc:1002 cname:videoCname
m=application 50000 DTLS/SCTP 5000
c=IN IP4 203.0.113.4
a=mid:data
a=sctpmap:5000 webrtc-datachannel 1024
"""

ANSWERER_SESSION = b"""v=0
o=- 206 1 IN IP4 192.168.1.101
s=session
c=IN IP4 192.168.1.5
b=CT:1000
t=0 0
a=ptime:40
m=audio 51624 RTP/AVP 97 101 13 0 8
c=IN IP4 0.0.0.0
a=rtcp:51625
a=label:Audio
a=sendrecv
a=rtpmap:97 RED/8000
a=rtpmap:101 telephone-event/8000
a=fmtp:101 0-16
a=rtpmap:13 CN/8000
a=rtpmap:0 PCMU/8000
a=rtpmap:8 PCMA/8000
a=ptime:20
"""

_MANY_CODECS_AUDIO = b"""m=audio 49170 RTP/AVP 0 8 9 18 96 97 98 99 100 101 102 103 104
a=rtpmap:0 PCMU/8000
a=rtpmap:8 PCMA/8000
a=rtpmap:9 G722/8000
a=rtpmap:18 G729/8000
"""

_MANY_CODECS_DYNAMIC = b"""a=rtpmap:96 opus/48000/2
a=fmtp:96 minptime=10;useinbandfec=1
a=rtpmap:97 AMR/8000
a=rtpmap:98 AMR-WB/16000
a=rtpmap:99 speex/8000
a=rtpmap:100 iLBC/8000
a=rtpmap:101 telephone-event/8000
a=fmtp:101 0-16
a=rtpmap:102 GSM/8000
a=rtpmap:103 LPC/8000
a=rtpmap:104 SILK/24000
a=sendrecv
a=mid:audio
a=ssrc:1001 cname:audioCname
m=video 51372 RTP/AVP 97 98
c=IN IP4 203.0.113.3
a=rtpmap:97 H264/90000
a=rtpmap:98 VP8/90000
a=fmtp:97 profile-level-id=42e01f;packetization-mode=1
a=sendrecv
a=mid:video
a=ssrc:1002 cname:videoCname
m=application 50000 DTLS/SCTP 5000
c=IN IP4 203.0.113.4
a=mid:data
a=sctpmap:5000 webrtc-datachannel 1024
"""

_MANY_CODECS_HEADER = b"""v=0
o=- 3849203748 3849203748 IN IP4 192.0.2.1
s=Multimedia Session Example
t=0 0
a=group:BUNDLE audio video data
a=msid-semantic: WMS myStream
c=IN IP4 203.0.113.1
"""

MANY_CODECS_OFFER = _MANY_CODECS_HEADER + _MANY_CODECS_AUDIO + _MANY_CODECS_DYNAMIC

# same as above, but relying on static payload types without rtpmap attributes
MANY_CODECS_OFFER_NO_STATIC_RTPMAPS = (
    _MANY_CODECS_HEADER
    + _MANY_CODECS_AUDIO.split(b"\n", 1)[0]
    + b"\n"
    + _MANY_CODECS_DYNAMIC
)

PJSIP_OFFER = b"""v=0
o=- 3973036347 3973036347 IN IP4 176.44.48.134
s=pjmedia
b=AS:84
t=0 0
a=X-nat:0
m=audio 4000 RTP/AVP 8 0 101
c=IN IP4 176.44.48.134
b=TIAS:64000
a=rtcp:4001 IN IP4 192.168.110.20
a=sendrecv
a=rtpmap:8 PCMA/8000
a=rtpmap:0 PCMU/8000
a=rtpmap:101 telephone-event/8000
a=fmtp:101 0-16
a=ssrc:1353510947 cname:2750fc3735de930b
"""

WEBRTC_OFFER = (
    b"v=0\r\no=- 4399166264069674367 2 IN IP4 127.0.0.1\r\ns=-\r\nt=0 0\r\n"
    b"a=group:BUNDLE 0\r\na=extmap-allow-mixed\r\n"
    b"a=msid-semantic: WMS 6573e9d8-9f2e-4feb-b064-13d4650251cf\r\n"
    b"m=audio 9 UDP/TLS/RTP/SAVPF 111 63 9 0 8 13 110 126\r\n"
    b"c=IN IP4 0.0.0.0\r\na=rtcp:9 IN IP4 0.0.0.0\r\n"
    b"a=candidate:4061950107 1 udp 2113937151 7b0d7f1b-c5b5-49d1-9ac9-44b835a58971.local "
    b"64679 typ host generation 0 network-cost 999\r\n"
    b"a=ice-ufrag:Vznr\r\na=ice-pwd:Tt/AbCdcHggQF8RipEHfZg10\r\na=ice-options:trickle\r\n"
    b"a=fingerprint:sha-256 3E:AD:44:E7:0C:B7:25:DE:4F:7E:21:AF:90:CA:BC:5E:66:AB:61:56:"
    b"FA:BB:16:95:D4:61:CB:4B:F1:BD:4C:8E\r\n"
    b"a=setup:actpass\r\na=mid:0\r\n"
    b"a=extmap:1 urn:ietf:params:rtp-hdrext:ssrc-audio-level\r\n"
    b"a=extmap:2 http://www.webrtc.org/experiments/rtp-hdrext/abs-send-time\r\n"
    b"a=extmap:3 http://www.ietf.org/id/draft-holmer-rmcat-transport-wide-cc-extensions-01\r\n"
    b"a=extmap:4 urn:ietf:params:rtp-hdrext:sdes:mid\r\n"
    b"a=sendrecv\r\n"
    b"a=msid:6573e9d8-9f2e-4feb-b064-13d4650251cf 4dcd226c-03f6-442a-a40b-ba207e835a35\r\n"
    b"a=rtcp-mux\r\na=rtcp-rsize\r\n"
    b"a=rtpmap:111 opus/48000/2\r\na=rtcp-fb:111 transport-cc\r\n"
    b"a=fmtp:111 minptime=10;useinbandfec=1\r\n"
    b"a=rtpmap:63 red/48000/2\r\na=fmtp:63 111/111\r\n"
    b"a=rtpmap:9 G722/8000\r\na=rtpmap:0 PCMU/8000\r\na=rtpmap:8 PCMA/8000\r\n"
    b"a=rtpmap:13 CN/8000\r\na=rtpmap:110 telephone-event/48000\r\n"
    b"a=rtpmap:126 telephone-event/8000\r\n"
    b"a=ssrc:397513585 cname:88eQYfCvDAGnLJ+q\r\n"
    b"a=ssrc:397513585 msid:6573e9d8-9f2e-4feb-b064-13d4650251cf "
    b"4dcd226c-03f6-442a-a40b-ba207e835a35\r\n"
)


ALL_SAMPLES = [
    SIMPLE_OFFER,
    MULTIMEDIA_OFFER,
    ANSWERER_SESSION,
    MANY_CODECS_OFFER,
    PJSIP_OFFER,
    WEBRTC_OFFER,
]


def parse_session(raw: bytes) -> Session:
    session, _ = parse(raw)
    return session


@pytest.fixture
def simple_offer() -> Session:
    """An audio only offer, sendonly, with G722, PCMA, PCMU and DTMF."""
    return parse_session(SIMPLE_OFFER)


@pytest.fixture
def multimedia_offer() -> Session:
    """An offer with audio, video and application (data channel) flows."""
    return parse_session(MULTIMEDIA_OFFER)


@pytest.fixture
def answerer_session() -> Session:
    """An audio only session, with RED, DTMF, CN, PCMU and PCMA."""
    return parse_session(ANSWERER_SESSION)


@pytest.fixture
def many_codecs_offer() -> Session:
    """An offer with 13 audio formats, plus video and application flows."""
    return parse_session(MANY_CODECS_OFFER)


@pytest.fixture
def pjsip_offer() -> Session:
    return parse_session(PJSIP_OFFER)


@pytest.fixture
def webrtc_offer() -> Session:
    return parse_session(WEBRTC_OFFER)


@pytest.fixture(
    params=ALL_SAMPLES, ids=["simple", "multimedia", "answerer", "many", "pjsip", "webrtc"]
)
def sample_session(request) -> Session:
    """Each of the sample sessions, parsed."""
    return parse_session(request.param)

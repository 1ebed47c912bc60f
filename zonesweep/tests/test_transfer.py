"""
Tests for zone transfer execution.
"""

import socket
from unittest.mock import patch

import dns.exception
import dns.message
import dns.query
import dns.rdatatype
import dns.rrset
import pytest

from zonesweep.core.config import ZoneSweepConfig
from zonesweep.core.orchestrator import Orchestrator
from zonesweep.core.transfer import (
    TransferSetupError,
    TransferStreamError,
    ZoneTransferError,
    ZoneTransferExecutor,
)


SOA = "ns1.example.com. hostmaster.example.com. 1 7200 3600 1209600 300"


def _envelope(*rrsets):
    message = dns.message.Message()
    for rrset in rrsets:
        message.answer.append(rrset)
    return message


def _first_envelope():
    return _envelope(
        dns.rrset.from_text("example.com.", 3600, "IN", "SOA", SOA),
        dns.rrset.from_text("example.com.", 3600, "IN", "NS", "ns1.example.com."),
    )


def _second_envelope():
    return _envelope(
        dns.rrset.from_text("www.example.com.", 300, "IN", "A", "192.0.2.1"),
        dns.rrset.from_text("example.com.", 3600, "IN", "SOA", SOA),
    )


def _stream(*items):
    """Fake dns.query.xfr: yields messages, raises exceptions."""
    def _xfr(*args, **kwargs):
        for item in items:
            if isinstance(item, BaseException):
                raise item
            yield item
    return _xfr


class TestZoneTransferExecutor:
    """Tests for ZoneTransferExecutor."""

    @patch('dns.query.xfr')
    def test_single_envelope(self, mock_xfr):
        """Test a one-message transfer returns all its records."""
        mock_xfr.side_effect = _stream(_first_envelope())

        result = ZoneTransferExecutor().transfer("example.com", "192.0.2.53")

        assert result.success
        assert result.domain == "example.com"
        assert result.nameserver == "192.0.2.53"
        assert [(r.name, r.type) for r in result.records] == [
            ("example.com.", "SOA"),
            ("example.com.", "NS"),
        ]

    @patch('dns.query.xfr')
    def test_xfr_arguments(self, mock_xfr):
        """Test the AXFR request uses the configured port and timeouts."""
        mock_xfr.side_effect = _stream(_first_envelope())

        executor = ZoneTransferExecutor(port=5353, timeout=4.0, lifetime=20.0)
        executor.transfer("example.com", "192.0.2.53")

        args, kwargs = mock_xfr.call_args
        assert args[0] == "192.0.2.53"
        assert args[1].to_text() == "example.com."
        assert kwargs["rdtype"] == dns.rdatatype.AXFR
        assert kwargs["port"] == 5353
        assert kwargs["timeout"] == 4.0
        assert kwargs["lifetime"] == 20.0
        assert kwargs["relativize"] is False

    @patch('dns.query.xfr')
    def test_envelopes_accumulate(self, mock_xfr):
        """Test records from every envelope are kept by default."""
        mock_xfr.side_effect = _stream(_first_envelope(), _second_envelope())

        result = ZoneTransferExecutor().transfer("example.com", "192.0.2.53")

        assert result.success
        assert [r.type for r in result.records] == ["SOA", "NS", "A", "SOA"]

    @patch('dns.query.xfr')
    def test_last_envelope_only(self, mock_xfr):
        """Test each envelope replaces the previous one when requested."""
        mock_xfr.side_effect = _stream(_first_envelope(), _second_envelope())

        executor = ZoneTransferExecutor(keep_last_envelope=True)
        result = executor.transfer("example.com", "192.0.2.53")

        assert result.success
        assert [(r.name, r.type) for r in result.records] == [
            ("www.example.com.", "A"),
            ("example.com.", "SOA"),
        ]

    @patch('dns.query.xfr')
    def test_iter_envelopes(self, mock_xfr):
        """Test envelopes are yielded one at a time in order."""
        mock_xfr.side_effect = _stream(_first_envelope(), _second_envelope())

        envelopes = list(ZoneTransferExecutor().iter_envelopes("example.com", "192.0.2.53"))

        assert [len(e) for e in envelopes] == [2, 2]
        assert envelopes[1][0].value == "192.0.2.1"

    @patch('dns.query.xfr')
    def test_refused(self, mock_xfr):
        """Test a refused transfer is a stream error with no records."""
        mock_xfr.side_effect = _stream(dns.query.TransferError(5))

        result = ZoneTransferExecutor().transfer("example.com", "192.0.2.53")

        assert not result.success
        assert isinstance(result.error, TransferStreamError)
        assert "refused" in result.error_message.lower()
        assert result.records == []

    @patch('dns.query.xfr')
    def test_failure_mid_stream_keeps_partial_records(self, mock_xfr):
        """Test an error after the first envelope keeps what arrived."""
        mock_xfr.side_effect = _stream(_first_envelope(), dns.exception.Timeout())

        result = ZoneTransferExecutor().transfer("example.com", "192.0.2.53")

        assert not result.success
        assert isinstance(result.error, TransferStreamError)
        assert len(result.records) == 2

    @patch('dns.query.xfr')
    def test_connection_refused_is_setup_error(self, mock_xfr):
        """Test a socket error before any envelope is a setup error."""
        mock_xfr.side_effect = _stream(ConnectionRefusedError(111, "Connection refused"))

        result = ZoneTransferExecutor().transfer("example.com", "192.0.2.53")

        assert isinstance(result.error, TransferSetupError)
        assert "192.0.2.53:53" in result.error_message

    @patch('dns.query.xfr')
    def test_timeout_before_first_envelope(self, mock_xfr):
        """Test a timeout before any envelope is a setup error."""
        mock_xfr.side_effect = _stream(dns.exception.Timeout())

        result = ZoneTransferExecutor().transfer("example.com", "192.0.2.53")

        assert isinstance(result.error, TransferSetupError)
        assert "timed out" in result.error_message

    @patch('dns.query.xfr')
    def test_connection_closed(self, mock_xfr):
        """Test an unexpected EOF is a stream error."""
        mock_xfr.side_effect = _stream(EOFError())

        result = ZoneTransferExecutor().transfer("example.com", "192.0.2.53")

        assert isinstance(result.error, TransferStreamError)
        assert result.error_message == "Connection closed by nameserver"

    @patch('dns.query.xfr')
    def test_malformed_stream(self, mock_xfr):
        """Test other DNS errors are stream errors."""
        mock_xfr.side_effect = _stream(dns.exception.FormError("No answer or RRset not for qname"))

        result = ZoneTransferExecutor().transfer("example.com", "192.0.2.53")

        assert isinstance(result.error, TransferStreamError)
        assert "No answer" in result.error_message

    @patch('dns.query.xfr')
    def test_iter_envelopes_raises(self, mock_xfr):
        """Test iter_envelopes propagates transfer errors."""
        mock_xfr.side_effect = _stream(dns.query.TransferError(5))

        with pytest.raises(ZoneTransferError):
            list(ZoneTransferExecutor().iter_envelopes("example.com", "192.0.2.53"))

    @patch('zonesweep.core.transfer.resolve_hostname')
    @patch('dns.query.xfr')
    def test_hostname_is_resolved(self, mock_xfr, mock_resolve):
        """Test nameserver hostnames are resolved before connecting."""
        mock_resolve.return_value = "192.0.2.53"
        mock_xfr.side_effect = _stream(_first_envelope())

        result = ZoneTransferExecutor().transfer("example.com", "ns1.example.com.")

        mock_resolve.assert_called_once_with("ns1.example.com")
        assert mock_xfr.call_args[0][0] == "192.0.2.53"
        assert result.nameserver == "ns1.example.com."
        assert result.success

    @patch('zonesweep.core.transfer.resolve_hostname')
    @patch('dns.query.xfr')
    def test_unresolvable_hostname(self, mock_xfr, mock_resolve):
        """Test an unresolvable nameserver is a setup error."""
        mock_resolve.side_effect = socket.gaierror("Name or service not known")

        result = ZoneTransferExecutor().transfer("example.com", "ns.invalid")

        assert isinstance(result.error, TransferSetupError)
        mock_xfr.assert_not_called()

    @patch('dns.query.xfr')
    def test_malformed_hostname_is_setup_error(self, mock_xfr):
        """Test hostnames with empty or oversized labels fail the attempt only."""
        mock_xfr.side_effect = _stream(_first_envelope())
        orchestrator = Orchestrator(ZoneSweepConfig(), executor=ZoneTransferExecutor())

        results = orchestrator.run([
            "example.com@ns..example.com",
            "example.org@" + "a" * 64 + ".example.org",
            "example.net@192.0.2.53",
        ])

        assert [r.domain for r in results] == ["example.com", "example.org", "example.net"]
        assert isinstance(results[0].error, TransferSetupError)
        assert isinstance(results[1].error, TransferSetupError)
        assert results[2].success
        assert mock_xfr.call_count == 1

    @patch('dns.query.xfr')
    def test_ipv6_nameserver(self, mock_xfr):
        """Test IPv6 addresses are used directly."""
        mock_xfr.side_effect = _stream(_first_envelope())

        ZoneTransferExecutor().transfer("example.com", "[2001:db8::53]")

        assert mock_xfr.call_args[0][0] == "2001:db8::53"

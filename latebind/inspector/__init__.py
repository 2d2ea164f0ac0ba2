"""Inspection tools for bodyless member bindings."""

from .report import MemberReport as MemberReport
from .report import ReportBuilder as ReportBuilder
from .report import TypeReport as TypeReport
from .report import build_report as build_report

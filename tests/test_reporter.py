import asyncio

from ip_sweeper.aggregator import ResultAggregator
from ip_sweeper.config import (
    CompletionRecord,
    ResponseRecord,
    RunStatistics,
    SweeperConfig,
)
from ip_sweeper.reporter import ReportGenerator


def _listed(report):
    return [line for line in report.splitlines() if line.startswith("| [ПОЛУЧЕН ОТВЕТ]")]


def test_report_truncates_after_display_limit():
    responses = [ResponseRecord(f"10.0.0.{i}", 1.0) for i in range(1, 31)]
    stats = RunStatistics(total=30, completed=30, responded=30)
    stats.finish()

    report = ReportGenerator(SweeperConfig()).generate(stats, responses)
    lines = report.splitlines()

    listed = _listed(report)
    assert len(listed) == 25
    assert listed[-1].endswith("IP: 10.0.0.25, RTT: 1.00 мс")
    truncation = [line for line in lines if "записей скрыто" in line]
    assert truncation == ["| ... 5 записей скрыто."]
    assert lines.index(truncation[0]) == lines.index(listed[-1]) + 1


def test_report_without_truncation():
    responses = [ResponseRecord(f"10.0.0.{i}", None) for i in range(1, 26)]
    stats = RunStatistics(total=25, completed=25, responded=25)

    report = ReportGenerator(SweeperConfig()).generate(stats, responses)

    assert len(_listed(report)) == 25
    assert "записей скрыто" not in report
    assert "RTT: неизвестно" in report


def test_report_guards_zero_probes():
    stats = RunStatistics(total=10)
    stats.finish()

    report = ReportGenerator(SweeperConfig()).generate(stats, [])

    assert "| Всего отправлено запросов: 0" in report
    assert "| Всего получено ответов: 0/0 (0.00%)" in report


def test_progress_line():
    stats = RunStatistics(total=8, completed=2)

    line = ReportGenerator.progress(stats)

    assert "| Проверено IP: 2/8 (25.00%)" in line


def test_aggregator_counts_each_record():
    async def scenario():
        completions = asyncio.Queue()
        responses = asyncio.Queue()
        stats = RunStatistics(total=3)
        aggregator = ResultAggregator(stats, completions, responses,
                                      should_stop=lambda: False, poll_interval=0.01)
        responses.put_nowait(ResponseRecord("1.1.1.2", 2.0))
        for address in ("1.1.1.1", "1.1.1.2", "1.1.1.3"):
            completions.put_nowait(CompletionRecord(address, f"IP проверен: {address}"))

        class DonePool:
            aborted = False
            finished = False

        await aggregator.collect(DonePool())
        return stats, aggregator

    stats, aggregator = asyncio.run(scenario())

    assert stats.completed == 3
    assert stats.responded == 1
    assert aggregator.responded == ["1.1.1.2"]


def test_aggregator_verbose_prints_records(capsys):
    async def scenario():
        completions = asyncio.Queue()
        responses = asyncio.Queue()
        aggregator = ResultAggregator(RunStatistics(total=1), completions, responses,
                                      should_stop=lambda: False, verbose=True)
        responses.put_nowait(ResponseRecord("1.1.1.1", 3.25))
        completions.put_nowait(CompletionRecord("1.1.1.1", "IP проверен: 1.1.1.1"))
        aggregator.drain()

    asyncio.run(scenario())

    out = capsys.readouterr().out
    assert "[ПОЛУЧЕН ОТВЕТ] IP: 1.1.1.1, RTT: 3.25 мс" in out
    assert "IP проверен: 1.1.1.1" in out


def test_progress_reporter_stops_after_finish():
    lines = []

    async def scenario():
        aggregator = ResultAggregator(RunStatistics(total=4), asyncio.Queue(), asyncio.Queue(),
                                      should_stop=lambda: False)
        task = asyncio.ensure_future(
            aggregator.report_progress(ReportGenerator(SweeperConfig()), 0.01, lines.append)
        )
        await asyncio.sleep(0.05)
        aggregator.finish()
        await asyncio.wait_for(task, timeout=1)

    asyncio.run(scenario())

    assert lines
    assert all("Проверено IP: 0/4" in line for line in lines)

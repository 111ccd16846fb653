"""
cli/app.py - 메인 CLI 엔트리포인트

Click 기반의 CLI 애플리케이션 진입점입니다.

명령어 구조:
    wscan scan [옵션]       # 낭비 리소스 스캔
    wscan init              # 샘플 설정 파일/IAM 정책 생성
    wscan --version         # 버전 표시

    예시:
    wscan scan -r us-east-1 -r ap-northeast-2
    wscan scan --all-regions --format json -o report.json
    wscan scan --exclude-tag Environment=prod --timeout 5m

종료 코드:
    0: 스캔 완료 (일부 리전/스캐너 에러가 있어도 완료로 봄)
    1: 설정 또는 자격 증명 오류
    2: 타임아웃으로 중단 (부분 결과 리포트는 출력됨)
    130: 사용자 중단 (Ctrl+C)
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError, ProfileNotFound

from cli.ui import (
    ScanProgressDisplay,
    configure_logging,
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from core.analysis import analyze
from core.config import SAMPLE_CONFIG, FileConfig, get_version, load_file_config, parse_timeout
from core.exceptions import ConfigError, ScanCancelledError
from core.parallel import CancelToken
from core.scan import AWSClient, ExcludeConfig, MultiRegionScanner, ScanConfig, ScanResult
from shared.io.output import REPORT_FORMATS, ReportData, get_reporter

logger = logging.getLogger(__name__)

VERSION = get_version()

DEFAULT_TIMEOUT = "10m"

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_TIMEOUT = 2
EXIT_INTERRUPTED = 130

POLICY_FILENAME = "wscan-policy.json"

# 스캔에 필요한 읽기 전용 권한
IAM_POLICY = {
    "Version": "2012-10-17",
    "Statement": [
        {
            "Sid": "WasteScanReadOnly",
            "Effect": "Allow",
            "Action": [
                "ec2:DescribeInstances",
                "ec2:DescribeVolumes",
                "ec2:DescribeAddresses",
                "ec2:DescribeNatGateways",
                "ec2:DescribeSecurityGroups",
                "ec2:DescribeNetworkInterfaces",
                "ec2:DescribeSnapshots",
                "ec2:DescribeImages",
                "ec2:DescribeRegions",
                "elasticloadbalancing:DescribeLoadBalancers",
                "elasticloadbalancing:DescribeTargetGroups",
                "elasticloadbalancing:DescribeTargetHealth",
                "rds:DescribeDBInstances",
                "lambda:ListFunctions",
                "sqs:ListQueues",
                "sqs:GetQueueAttributes",
                "sns:ListTopics",
                "sns:ListSubscriptionsByTopic",
                "kinesis:ListStreams",
                "kinesis:DescribeStreamSummary",
                "firehose:ListDeliveryStreams",
                "cloudwatch:GetMetricData",
            ],
            "Resource": "*",
        }
    ],
}

# (에러 문자열에 포함된 코드, 안내 문구)
_ERROR_HINTS: tuple[tuple[tuple[str, ...], str], ...] = (
    (
        ("NoCredentialProviders", "Unable to locate credentials"),
        "AWS 자격 증명을 설정하세요: AWS_PROFILE 또는 AWS_ACCESS_KEY_ID/AWS_SECRET_ACCESS_KEY, 혹은 'aws configure'",
    ),
    (("ExpiredToken",), "세션 토큰이 만료되었습니다. 자격 증명을 갱신하거나 'aws sso login'을 실행하세요"),
    (
        ("AccessDenied", "UnauthorizedAccess", "UnauthorizedOperation"),
        f"권한이 부족합니다. 'wscan init'이 생성한 {POLICY_FILENAME} 정책을 IAM 역할/사용자에 적용하세요",
    ),
    (("RequestExpired",), "요청이 만료되었습니다. 시스템 시계 동기화를 확인하세요"),
    (("Throttling",), "AWS API 호출 한도에 도달했습니다. 리전 수를 줄이거나 타임아웃을 늘려 다시 시도하세요"),
)


def error_hint(error: BaseException) -> str | None:
    """흔한 AWS 오류에 대한 해결 안내 (해당 없으면 None)"""
    if isinstance(error, NoCredentialsError):
        return _ERROR_HINTS[0][1]
    text = str(error)
    for needles, hint in _ERROR_HINTS:
        if any(needle in text for needle in needles):
            return hint
    return None


def _fail(action: str, error: BaseException) -> None:
    print_error(f"{action}: {error}")
    hint = error_hint(error)
    if hint:
        console.print(f"  [dim]hint: {hint}[/dim]")
    raise SystemExit(EXIT_CONFIG_ERROR)


def _pick(cli_value, file_value, default):
    if cli_value is not None:
        return cli_value
    if file_value is not None:
        return file_value
    return default


def build_scan_config(
    file_cfg: FileConfig,
    idle_days: int | None = None,
    stale_days: int | None = None,
    min_monthly_cost: float | None = None,
    idle_cpu_threshold: float | None = None,
    high_memory_threshold: float | None = None,
    stopped_threshold_days: int | None = None,
    exclude_ids: tuple[str, ...] = (),
    exclude_tags: tuple[str, ...] = (),
) -> ScanConfig:
    """CLI 옵션 > 설정 파일 > 기본값 순으로 ScanConfig 구성

    제외 규칙은 CLI와 설정 파일 값을 합칩니다.
    """
    defaults = ScanConfig()
    exclude = ExcludeConfig.from_lists(
        [*file_cfg.exclude_resource_ids, *exclude_ids],
        [*file_cfg.exclude_tags, *exclude_tags],
    )
    return ScanConfig(
        idle_days=_pick(idle_days, file_cfg.idle_days, defaults.idle_days),
        stale_days=_pick(stale_days, file_cfg.stale_days, defaults.stale_days),
        min_monthly_cost=_pick(min_monthly_cost, file_cfg.min_monthly_cost, defaults.min_monthly_cost),
        idle_cpu_threshold=_pick(idle_cpu_threshold, file_cfg.idle_cpu_threshold, defaults.idle_cpu_threshold),
        high_memory_threshold=_pick(
            high_memory_threshold, file_cfg.high_memory_threshold, defaults.high_memory_threshold
        ),
        stopped_threshold_days=_pick(
            stopped_threshold_days, file_cfg.stopped_threshold_days, defaults.stopped_threshold_days
        ),
        nat_gw_low_traffic_gb=_pick(None, file_cfg.nat_gw_low_traffic_gb, defaults.nat_gw_low_traffic_gb),
        exclude=exclude,
    )


def resolve_regions(aws: AWSClient, regions: tuple[str, ...], all_regions: bool, file_cfg: FileConfig) -> list[str]:
    """스캔 대상 리전 결정

    --all-regions > --region > 설정 파일 regions > 활성화된 모든 리전
    """
    if not all_regions:
        if regions:
            return list(dict.fromkeys(regions))
        if file_cfg.regions:
            return list(dict.fromkeys(file_cfg.regions))
    return aws.list_enabled_regions()


def write_report(data: ReportData, fmt: str, output: str | None) -> None:
    reporter = get_reporter(fmt)
    if output:
        with open(output, "w", encoding="utf-8") as f:
            reporter.generate(data, f)
        print_success(f"리포트 저장: {output}")
    else:
        reporter.generate(data, sys.stdout)


@click.group()
@click.version_option(VERSION, prog_name="wscan")
def cli() -> None:
    """wscan - AWS 낭비 리소스 스캐너

    여러 리전의 유휴/방치 리소스를 찾아 월 예상 낭비 비용을 보고합니다.
    """


@cli.command("scan")
@click.option("-r", "--region", "regions", multiple=True, help="스캔할 리전 (다중 가능)")
@click.option("--all-regions", is_flag=True, help="활성화된 모든 리전 스캔")
@click.option("-p", "--profile", default=None, help="AWS 프로파일")
@click.option("--idle-days", type=click.IntRange(min=1), default=None, help="사용률 메트릭 조회 기간 (일, 기본 7)")
@click.option("--stale-days", type=click.IntRange(min=1), default=None, help="오래된 스냅샷 기준 (일, 기본 90)")
@click.option("--min-monthly-cost", type=float, default=None, help="보고할 최소 월 비용 ($, 기본 1.0)")
@click.option("--idle-cpu-threshold", type=float, default=None, help="유휴 판단 CPU % (기본 5)")
@click.option("--high-memory-threshold", type=float, default=None, help="유휴가 아닌 메모리 % (기본 50)")
@click.option("--stopped-threshold-days", type=click.IntRange(min=1), default=None, help="중지 EC2 보고 기준 (일, 기본 30)")
@click.option("--exclude-id", "exclude_ids", multiple=True, help="제외할 리소스 ID (다중 가능)")
@click.option("--exclude-tag", "exclude_tags", multiple=True, help="제외할 태그 Key=Value 또는 Key (다중 가능)")
@click.option("--concurrency", type=int, default=None, help="동시 스캔 리전 수 (기본 4)")
@click.option("-f", "--format", "fmt", type=click.Choice(REPORT_FORMATS), default=None, help="출력 형식 (기본 text)")
@click.option("-o", "--output", default=None, help="출력 파일 경로 (기본 stdout)")
@click.option("--timeout", default=None, help="스캔 타임아웃 (예: 90s, 10m, 1h / 기본 10m)")
@click.option("--no-progress", is_flag=True, help="진행 표시 끄기")
@click.option("-v", "--verbose", is_flag=True, help="상세 로그 출력")
def scan_command(
    regions: tuple[str, ...],
    all_regions: bool,
    profile: str | None,
    idle_days: int | None,
    stale_days: int | None,
    min_monthly_cost: float | None,
    idle_cpu_threshold: float | None,
    high_memory_threshold: float | None,
    stopped_threshold_days: int | None,
    exclude_ids: tuple[str, ...],
    exclude_tags: tuple[str, ...],
    concurrency: int | None,
    fmt: str | None,
    output: str | None,
    timeout: str | None,
    no_progress: bool,
    verbose: bool,
) -> None:
    """AWS 리소스 낭비 스캔

    \b
    Examples:
        wscan scan                          # 활성화된 모든 리전
        wscan scan -r ap-northeast-2        # 특정 리전
        wscan scan -f sarif -o wscan.sarif  # SARIF 파일 출력
    """
    configure_logging(verbose)

    try:
        file_cfg = load_file_config(Path.cwd())
        timeout_seconds = parse_timeout(_pick(timeout, file_cfg.timeout, DEFAULT_TIMEOUT))
        report_format = _pick(fmt, file_cfg.format, "text")
        get_reporter(report_format)
    except ConfigError as e:
        _fail("설정 오류", e)

    scan_config = build_scan_config(
        file_cfg,
        idle_days=idle_days,
        stale_days=stale_days,
        min_monthly_cost=min_monthly_cost,
        idle_cpu_threshold=idle_cpu_threshold,
        high_memory_threshold=high_memory_threshold,
        stopped_threshold_days=stopped_threshold_days,
        exclude_ids=exclude_ids,
        exclude_tags=exclude_tags,
    )
    profile = profile or file_cfg.profile

    try:
        aws = AWSClient(profile=profile)
    except (ProfileNotFound, BotoCoreError) as e:
        _fail("AWS 클라이언트 초기화 실패", e)

    try:
        target_regions = resolve_regions(aws, regions, all_regions, file_cfg)
    except (ClientError, BotoCoreError) as e:
        _fail("리전 목록 조회 실패", e)

    if not target_regions:
        print_warning("스캔할 리전이 없습니다")

    logger.info(f"{len(target_regions)}개 리전 스캔: {', '.join(target_regions)}")
    if target_regions and not verbose:
        print_info(f"리전 {len(target_regions)}개 스캔 (타임아웃 {timeout_seconds:.0f}초)")

    token = CancelToken.with_timeout(timeout_seconds)
    show_progress = not no_progress and not verbose
    exit_code = EXIT_OK
    partial = False

    with ScanProgressDisplay(total_regions=len(target_regions), enabled=show_progress) as progress:
        scanner = MultiRegionScanner(
            aws,
            target_regions,
            scan_config,
            concurrency=concurrency,
            on_progress=progress.update,
            token=token,
        )
        try:
            result = scanner.scan_all()
        except ScanCancelledError as e:
            result = e.partial_result or ScanResult(regions_scanned=len(target_regions))
            partial = True
            exit_code = EXIT_TIMEOUT
        except KeyboardInterrupt:
            token.cancel("사용자 중단")
            print_warning("사용자에 의해 중단되었습니다")
            raise SystemExit(EXIT_INTERRUPTED) from None

    if partial:
        print_warning(f"스캔이 중단되었습니다 ({token.reason}). 부분 결과를 출력합니다")

    analysis = analyze(result, scan_config.min_monthly_cost)
    data = ReportData.from_analysis(
        analysis,
        version=VERSION,
        regions=target_regions,
        idle_days=scan_config.idle_days,
        stale_days=scan_config.stale_days,
        min_monthly_cost=scan_config.min_monthly_cost,
        profile=profile,
        partial=partial,
    )

    try:
        write_report(data, report_format, output)
    except OSError as e:
        _fail("리포트 저장 실패", e)

    if analysis.errors:
        print_warning(f"스캔 중 에러 {len(analysis.errors)}건 (리포트 참고)")

    raise SystemExit(exit_code)


@cli.command("init")
@click.option("--force", is_flag=True, help="기존 파일 덮어쓰기")
def init_command(force: bool) -> None:
    """샘플 설정 파일(.wscan.yaml)과 IAM 정책 생성"""
    policy = json.dumps(IAM_POLICY, indent=2) + "\n"
    files = ((Path(".wscan.yaml"), SAMPLE_CONFIG), (Path(POLICY_FILENAME), policy))

    written = []
    for path, content in files:
        if path.exists() and not force:
            print_warning(f"{path} 이미 존재 (덮어쓰려면 --force)")
            continue
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            _fail(f"{path} 생성 실패", e)
        written.append(str(path))

    if written:
        print_success(f"생성됨: {', '.join(written)}")
        console.print("\n다음 단계:")
        console.print("  1. .wscan.yaml에서 스캔 설정 조정")
        console.print(f"  2. {POLICY_FILENAME}을 AWS IAM 역할/사용자에 적용")
        console.print("  3. 실행: wscan scan")


if __name__ == "__main__":
    cli()

"""Tests for the Prometheus collectors."""

import threading
from unittest.mock import Mock

import pytest
from prometheus_client.registry import CollectorRegistry

from bosh_exporter.collectors import (
    BoshCollector,
    SubCollector,
    DeploymentsCollector,
    JobsCollector,
    ServiceDiscoveryCollector,
)
from bosh_exporter.core.errors import FetchError, WriteError
from bosh_exporter.deployments import (
    DeploymentInfo,
    Fetcher,
    FetchResult,
    Instance,
    Process,
    Vitals,
)
from bosh_exporter.director.models import Release, Stemcell
from bosh_exporter.filters import CollectorsFilter, RegexpFilter

COMMON = {"environment": "test", "bosh_name": "bosh", "bosh_uuid": "uuid"}


def _instance(name="nats", index="0", az="z1", ip="10.0.0.1", healthy=True, processes=None):
    return Instance(
        name=name,
        id=f"{name}-{index}",
        index=index,
        az=az,
        ips=(ip,),
        healthy=healthy,
        vm_type="small",
        vitals=Vitals(load=(0.1, 0.2, None), cpu_sys=1.5, mem_kb=1024.0),
        processes=tuple(
            processes
            if processes is not None
            else [Process(name=name, healthy=True, uptime_seconds=60.0, cpu_total=0.5)]
        ),
    )


def _deployment(name="cf", instances=None):
    return DeploymentInfo(
        name=name,
        releases=(Release(name=f"{name}-release", version="1.0"),),
        stemcells=(Stemcell(name="bosh-stemcell", version="621.1"),),
        instances=tuple(instances if instances is not None else [_instance()]),
    )


def _collect(collector, deployments):
    return {
        (sample.name, tuple(sorted(sample.labels.items()))): sample.value
        for family in collector.collect(deployments)
        for sample in family.samples
    }


def _key(name, **labels):
    return (name, tuple(sorted({**COMMON, **labels}.items())))


def _scrape(collector):
    return {
        (sample.name, tuple(sorted(sample.labels.items()))): sample.value
        for family in collector.collect()
        for sample in family.samples
    }


@pytest.fixture
def fetcher():
    mock = Mock(spec=Fetcher)
    mock.fetch.return_value = FetchResult(deployments=(_deployment(),))
    return mock


@pytest.fixture
def make_collector(fetcher, tmp_path):
    def factory(collectors=(), processes=(), **kwargs):
        return BoshCollector(
            "bosh",
            "test",
            "bosh",
            "uuid",
            str(tmp_path / "targets.json"),
            kwargs.pop("fetcher", fetcher),
            CollectorsFilter(list(collectors)),
            RegexpFilter(list(processes)),
            **kwargs,
        )

    return factory


def _registry(collector):
    registry = CollectorRegistry()
    registry.register(collector)
    return registry


class TestSubCollector:
    def test_populate_hook_is_required(self):
        class Incomplete(SubCollector):
            name = "Incomplete"

        with pytest.raises(TypeError):
            Incomplete("bosh", "test", "bosh", "uuid")


class TestDeploymentsCollector:
    def test_release_stemcell_and_instance_metrics(self):
        collector = DeploymentsCollector("bosh", "test", "bosh", "uuid")
        deployment = _deployment(instances=[_instance("nats"), _instance("router", ip="10.0.0.2")])

        samples = _collect(collector, [deployment])

        release = _key(
            "bosh_deployment_release_info",
            bosh_deployment="cf",
            bosh_release_name="cf-release",
            bosh_release_version="1.0",
        )
        stemcell = _key(
            "bosh_deployment_stemcell_info",
            bosh_deployment="cf",
            bosh_stemcell_name="bosh-stemcell",
            bosh_stemcell_version="621.1",
        )
        instances = _key("bosh_deployment_instances", bosh_deployment="cf", bosh_vm_type="small")
        assert samples[release] == 1
        assert samples[stemcell] == 1
        assert samples[instances] == 2
        assert _key("bosh_last_deployments_scrape_timestamp") in samples
        assert _key("bosh_last_deployments_scrape_duration_seconds") in samples


class TestJobsCollector:
    def test_instance_and_process_metrics(self):
        collector = JobsCollector("bosh", "test", "bosh", "uuid")
        unhealthy = _instance(
            "router",
            ip="10.0.0.2",
            healthy=False,
            processes=[Process(name="gorouter", healthy=False)],
        )

        samples = _collect(collector, [_deployment(instances=[_instance(), unhealthy])])

        nats = {
            "bosh_deployment": "cf",
            "bosh_job_name": "nats",
            "bosh_job_id": "nats-0",
            "bosh_job_index": "0",
            "bosh_job_az": "z1",
            "bosh_job_ip": "10.0.0.1",
        }
        router = {
            **nats,
            "bosh_job_name": "router",
            "bosh_job_id": "router-0",
            "bosh_job_ip": "10.0.0.2",
        }
        nats_process = {**nats, "bosh_job_process_name": "nats"}
        assert samples[_key("bosh_job_healthy", **nats)] == 1
        assert samples[_key("bosh_job_healthy", **router)] == 0
        assert samples[_key("bosh_job_load_avg01", **nats)] == 0.1
        assert samples[_key("bosh_job_cpu_sys", **nats)] == 1.5
        assert samples[_key("bosh_job_mem_kb", **nats)] == 1024.0
        assert samples[_key("bosh_job_process_healthy", **nats_process)] == 1
        assert samples[_key("bosh_job_process_uptime_seconds", **nats_process)] == 60
        gorouter = {**router, "bosh_job_process_name": "gorouter"}
        assert samples[_key("bosh_job_process_healthy", **gorouter)] == 0

    def test_missing_vitals_are_skipped(self):
        collector = JobsCollector("bosh", "test", "bosh", "uuid")

        samples = _collect(collector, [_deployment()])
        names = {name for name, _ in samples}

        assert "bosh_job_load_avg15" not in names
        assert "bosh_job_swap_kb" not in names
        assert "bosh_job_process_mem_kb" not in names


class TestServiceDiscoveryCollector:
    def test_writes_file_and_reports_groups(self, tmp_path):
        path = tmp_path / "targets.json"
        collector = ServiceDiscoveryCollector(
            "bosh", "test", "bosh", "uuid", str(path), RegexpFilter([])
        )

        samples = _collect(collector, [_deployment()])

        assert path.exists()
        assert samples[_key("bosh_service_discovery_target_groups")] == 1

    def test_write_error_propagates(self, tmp_path):
        collector = ServiceDiscoveryCollector(
            "bosh", "test", "bosh", "uuid", str(tmp_path / "missing" / "t.json"), RegexpFilter([])
        )

        with pytest.raises(WriteError):
            _collect(collector, [_deployment()])


class TestBoshCollector:
    def test_all_collectors_up(self, make_collector):
        registry = _registry(make_collector())

        for name in ("Deployments", "Jobs", "ServiceDiscovery"):
            assert registry.get_sample_value("bosh_up", {**COMMON, "collector": name}) == 1
        assert registry.get_sample_value("bosh_job_healthy", {
            **COMMON,
            "bosh_deployment": "cf",
            "bosh_job_name": "nats",
            "bosh_job_id": "nats-0",
            "bosh_job_index": "0",
            "bosh_job_az": "z1",
            "bosh_job_ip": "10.0.0.1",
        }) == 1
        assert registry.get_sample_value("bosh_last_scrape_error", COMMON) == 0

    def test_collectors_filter_disables_collectors(self, make_collector, tmp_path):
        collector = make_collector(collectors=["Jobs"])
        registry = _registry(collector)

        assert [c.name for c in collector.collectors] == ["Jobs"]
        assert registry.get_sample_value("bosh_up", {**COMMON, "collector": "Jobs"}) == 1
        assert registry.get_sample_value("bosh_up", {**COMMON, "collector": "Deployments"}) is None
        assert not (tmp_path / "targets.json").exists()

    def test_failing_collector_is_isolated(self, make_collector, monkeypatch):
        collector = make_collector()

        def explode(families, deployments):
            raise RuntimeError("boom")

        jobs = next(c for c in collector.collectors if c.name == "Jobs")
        monkeypatch.setattr(jobs, "_populate", explode)
        registry = _registry(collector)

        assert registry.get_sample_value("bosh_up", {**COMMON, "collector": "Jobs"}) == 0
        assert registry.get_sample_value("bosh_up", {**COMMON, "collector": "Deployments"}) == 1
        assert registry.get_sample_value("bosh_last_jobs_scrape_timestamp", COMMON) is None
        assert registry.get_sample_value("bosh_deployment_instances", {
            **COMMON, "bosh_deployment": "cf", "bosh_vm_type": "small"
        }) == 1
        assert registry.get_sample_value("bosh_last_scrape_error", COMMON) == 1

    def test_write_error_marks_service_discovery_down(self, make_collector, tmp_path):
        collector = make_collector()
        sd = next(c for c in collector.collectors if c.name == "ServiceDiscovery")
        sd.sd_filename = str(tmp_path / "missing" / "targets.json")

        registry = _registry(collector)

        sd_up = registry.get_sample_value("bosh_up", {**COMMON, "collector": "ServiceDiscovery"})
        assert sd_up == 0
        assert registry.get_sample_value("bosh_up", {**COMMON, "collector": "Jobs"}) == 1

    @pytest.mark.parametrize(
        "error",
        [FetchError("director down"), KeyError("name"), RuntimeError("unexpected")],
    )
    def test_fetch_failure_marks_all_collectors_down(self, make_collector, fetcher, error):
        fetcher.fetch.side_effect = error

        samples = _scrape(make_collector())

        for name in ("Deployments", "Jobs", "ServiceDiscovery"):
            assert samples[_key("bosh_up", collector=name)] == 0
        assert samples[_key("bosh_last_scrape_error")] == 1
        assert samples[_key("bosh_scrapes_total")] == 1
        assert samples[_key("bosh_scrape_errors_total")] == 1
        instances = _key("bosh_deployment_instances", bosh_deployment="cf", bosh_vm_type="small")
        assert instances not in samples

    def test_partial_fetch_is_reported(self, make_collector, fetcher):
        fetcher.fetch.return_value = FetchResult(
            deployments=(_deployment("cf"),),
            failures=(FetchError("boom", deployment="redis"),),
        )
        registry = _registry(make_collector())

        assert registry.get_sample_value("bosh_deployment_fetch_errors", COMMON) == 1
        assert registry.get_sample_value("bosh_up", {**COMMON, "collector": "Jobs"}) == 1
        assert registry.get_sample_value("bosh_last_scrape_error", COMMON) == 1

    def test_scrape_counters_accumulate(self, make_collector):
        collector = make_collector(collectors=["Deployments"])

        for _ in range(3):
            list(collector.collect())
        registry = _registry(collector)

        assert registry.get_sample_value("bosh_scrapes_total", COMMON) == 4
        assert registry.get_sample_value("bosh_scrape_errors_total", COMMON) == 0

    def test_describe_does_not_fetch(self, make_collector, fetcher):
        collector = make_collector()

        names = {family.name for family in collector.describe()}

        fetcher.fetch.assert_not_called()
        assert "bosh_up" in names
        assert "bosh_job_healthy" in names
        assert "bosh_deployment_release_info" in names
        assert "bosh_last_service_discovery_scrape_timestamp" in names
        assert all(not family.samples for family in collector.describe())

    def test_concurrent_collects_use_own_snapshots(self, make_collector, fetcher):
        snapshots = {
            "a": FetchResult(deployments=(_deployment("a"),)),
            "b": FetchResult(deployments=(_deployment("b"),)),
        }
        local = threading.local()
        fetcher.fetch.side_effect = lambda: snapshots[local.name]
        collector = make_collector(collectors=["Deployments", "Jobs"])
        barrier = threading.Barrier(8)
        outputs = {}

        def scrape(index):
            local.name = "a" if index % 2 else "b"
            barrier.wait()
            deployments = {
                sample.labels["bosh_deployment"]
                for family in collector.collect()
                for sample in family.samples
                if "bosh_deployment" in sample.labels
            }
            outputs[index] = (local.name, deployments)

        threads = [threading.Thread(target=scrape, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(outputs) == 8
        for name, deployments in outputs.values():
            assert deployments == {name}
        assert collector._scrapes == 8

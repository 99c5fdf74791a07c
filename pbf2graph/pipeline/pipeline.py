"""
Pipeline that turns an OSM extract into a road graph and queries it.

Steps, in order:
1. Load the road ways and their nodes from the extract
2. Export the graph as two CSV tables
3. Optionally export the graph to a GeoPackage
4. Optionally compute a shortest path between two nodes

Each step can be enabled or disabled through the configuration and the
steps share state through the pipeline context.
"""

import os
import copy
import time
import json
import logging
from typing import Dict, List, Optional, Union, Any, Callable

from ..core.graph import RoadGraph
from ..core.routing import shortest_path, path_length
from ..io.loaders import load_road_graph
from ..io.exporters import write_csv, export_geopackage
from ..pipeline_config import PIPELINE_CONFIG, PipelineConfigError
from .graph_builder import GraphBuilder


class PipelineStep:
    """A single step of the pipeline."""

    def __init__(self, name: str, function: Callable, enabled: bool = True, params: Dict = None):
        """
        Initialize a pipeline step.

        Args:
            name: Step name
            function: Function to run, called as ``function(context, **params)``
            enabled: Whether the step runs
            params: Keyword arguments for the function
        """
        self.name = name
        self.function = function
        self.enabled = enabled
        self.params = params or {}
        self.result = None
        self.execution_time = 0
        self.status = "pending"
        self.error = None
        self.error_type = None

    def execute(self, pipeline_context: Dict) -> Any:
        """
        Run the step.

        Args:
            pipeline_context: Shared pipeline context

        Returns:
            Result of the step function
        """
        if not self.enabled:
            self.status = "skipped"
            return None

        try:
            self.status = "running"
            start_time = time.time()

            self.result = self.function(pipeline_context, **self.params)

            self.execution_time = time.time() - start_time
            self.status = "completed"
            return self.result

        except Exception as e:
            self.status = "failed"
            self.error = str(e)
            self.error_type = type(e).__name__
            logging.getLogger('pbf2graph.pipeline').error(
                f"Step '{self.name}' failed with {self.error_type}: {e}")
            raise

    def describe_failure(self) -> Optional[str]:
        """
        One-line description of the failure, e.g.
        ``shortest_path: DanglingEdgeReference: Node 6 is referenced ...``.

        Returns:
            Description, or None if the step did not fail
        """
        if self.status != "failed":
            return None
        return f"{self.name}: {self.error_type}: {self.error}"


class PipelineConfig:
    """Pipeline configuration, layered over ``PIPELINE_CONFIG``."""

    def __init__(self, config_dict: Dict = None, config_file: str = None):
        """
        Initialize a pipeline configuration.

        Args:
            config_dict: Settings overriding the file and the defaults
            config_file: Path to a JSON file with settings

        Raises:
            PipelineConfigError: If the file cannot be read or parsed
        """
        self.config = copy.deepcopy(PIPELINE_CONFIG)

        if config_file:
            if not os.path.exists(config_file):
                raise PipelineConfigError(f"Configuration file not found: {config_file}")
            try:
                with open(config_file, 'r') as f:
                    self._merge(json.load(f))
            except (OSError, json.JSONDecodeError) as e:
                raise PipelineConfigError(f"Invalid configuration file {config_file}: {e}") from e

        if config_dict:
            self._merge(config_dict)

    def _merge(self, overrides: Dict):
        if not isinstance(overrides, dict):
            raise PipelineConfigError("Configuration must be a JSON object")

        for key, value in overrides.items():
            if key == 'steps':
                for step in value:
                    self._merge_step(step)
            elif isinstance(value, dict) and isinstance(self.config.get(key), dict):
                self.config[key].update(value)
            else:
                self.config[key] = value

    def _merge_step(self, override: Dict):
        name = override.get('name')
        for step in self.config['steps']:
            if step['name'] == name:
                if 'enabled' in override:
                    step['enabled'] = override['enabled']
                params = override.get('params') or {}
                unknown = set(params) - set(step['params'])
                if unknown:
                    raise PipelineConfigError(f"Unknown parameters for step '{name}': {sorted(unknown)}")
                step['params'].update(params)
                return
        raise PipelineConfigError(f"Unknown pipeline step: {name}")

    def get_step_config(self, step_name: str) -> Dict:
        """
        Get the parameters of a step.

        Args:
            step_name: Step name

        Returns:
            Step parameters
        """
        for step in self.config['steps']:
            if step['name'] == step_name:
                return dict(step.get('params') or {})

        return {}

    def is_step_enabled(self, step_name: str) -> bool:
        """
        Check whether a step is enabled.

        Args:
            step_name: Step name

        Returns:
            True if the step is enabled, False otherwise
        """
        for step in self.config['steps']:
            if step['name'] == step_name:
                return step.get('enabled', True)

        return True

    def get_global_config(self) -> Dict:
        """
        Get the settings that do not belong to a step.

        Returns:
            Global settings
        """
        return {key: value for key, value in self.config.items() if key != 'steps'}


class Pipeline:
    """Pipeline from an OSM extract to an exported, queryable road graph."""

    def __init__(self, config: Union[Dict, PipelineConfig, str] = None):
        """
        Initialize a pipeline.

        Args:
            config: Pipeline configuration (dictionary, PipelineConfig or path to a JSON file)
        """
        if isinstance(config, dict):
            self.config = PipelineConfig(config_dict=config)
        elif isinstance(config, PipelineConfig):
            self.config = config
        elif isinstance(config, str):
            self.config = PipelineConfig(config_file=config)
        else:
            self.config = PipelineConfig()

        self.context = {
            'graph': None,         # Road graph
            'path': None,          # Node ids of the computed route
            'path_length': None,   # Length of the route in degrees
            'outputs': {},         # Files written by the pipeline
        }

        self.logger = self._setup_logger()

        self.steps = []
        self._setup_steps()

    def _setup_logger(self) -> logging.Logger:
        """
        Configure the package logger.

        Returns:
            Configured logger
        """
        settings = self.config.get_global_config().get('logger', {})
        level = getattr(logging, str(settings.get('level', 'INFO')).upper(), logging.INFO)

        logger = logging.getLogger('pbf2graph')
        logger.setLevel(level)

        if settings.get('console', True) and not logger.handlers:
            console_handler = logging.StreamHandler()
            formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        return logging.getLogger('pbf2graph.pipeline')

    def _setup_steps(self):
        """Configure the pipeline steps."""
        functions = {
            'load_graph': self._load_graph,
            'export_csv': self._export_csv,
            'export_geopackage': self._export_geopackage,
            'shortest_path': self._shortest_path,
        }
        self.steps = [
            PipelineStep(name, function,
                         enabled=self.config.is_step_enabled(name),
                         params=self.config.get_step_config(name))
            for name, function in functions.items()
        ]

    def run(self, graph: Optional[RoadGraph] = None) -> Dict:
        """
        Run every enabled step.

        Args:
            graph: Already built graph; when given, the extract is not read

        Returns:
            Pipeline context
        """
        if graph is not None:
            self.context['graph'] = graph

        self.logger.info("Starting pipeline")
        start_time = time.time()

        for step in self.steps:
            if step.enabled:
                self.logger.info(f"Running step: {step.name}")
                step.execute(self.context)
                self.logger.info(f"Step {step.name} finished in {step.execution_time:.2f}s")
            else:
                step.execute(self.context)
                self.logger.info(f"Step {step.name} disabled")

        total_time = time.time() - start_time
        self.logger.info(f"Pipeline finished in {total_time:.2f}s")

        return self.context

    def get_step(self, step_name: str) -> Optional[PipelineStep]:
        for step in self.steps:
            if step.name == step_name:
                return step
        return None

    def failed_step(self) -> Optional[PipelineStep]:
        """Get the step that stopped the last run, if any."""
        for step in self.steps:
            if step.status == "failed":
                return step
        return None

    def summary(self) -> List[Dict]:
        """
        Get the status of every step.

        Returns:
            One dictionary per step with name, status, time and error
        """
        return [
            {'name': step.name, 'status': step.status,
             'execution_time': step.execution_time, 'error': step.error,
             'error_type': step.error_type}
            for step in self.steps
        ]

    # Steps

    def _load_graph(self, context: Dict, **params) -> RoadGraph:
        if context['graph'] is not None:
            self.logger.info(f"Using provided graph: {context['graph']}")
            return context['graph']

        pbf_file = self.config.get_global_config().get('pbf_file')
        if not pbf_file:
            raise PipelineConfigError("No input file configured ('pbf_file')")

        builder = GraphBuilder.from_config(params)
        context['graph'] = load_road_graph(pbf_file, builder)
        return context['graph']

    def _export_csv(self, context: Dict, output_directory: str, nodes_file: str,
                    edges_file: str, float_format: Optional[str] = None):
        paths = write_csv(context['graph'], output_directory,
                          nodes_file=nodes_file, edges_file=edges_file,
                          float_format=float_format)
        context['outputs']['nodes'], context['outputs']['edges'] = paths
        return paths

    def _export_geopackage(self, context: Dict, path: Optional[str] = None):
        if not path:
            raise PipelineConfigError("No GeoPackage path configured for step 'export_geopackage'")
        context['outputs']['geopackage'] = export_geopackage(context['graph'], path)
        return path

    def _shortest_path(self, context: Dict, start=None, end=None, deadline=None):
        if start is None or end is None:
            self.logger.info("No route requested")
            return None

        graph = context['graph']
        path = shortest_path(graph, start, end, deadline=deadline)
        context['path'] = path

        if path is None:
            self.logger.info(f"No path from {start} to {end}")
            return None

        context['path_length'] = path_length(graph, path)
        self.logger.info(f"Path from {start} to {end}: {len(path)} nodes, length {context['path_length']:.6f}")
        return path

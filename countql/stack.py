"""Infrastructure descriptors for the count resolvers.

One executor function and one data source are shared by every resolver of a
transform run. Logical IDs derive from type and field names, so adding the same
descriptor twice addresses the same resource.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from .config import TransformConfig
from .core.annotations import API_ID_PARAMETER, ENV_PARAMETER, TableReference
from .core.naming import logical_id
from .registry import BindingRegistry, ResolverBinding

__all__ = ['CountResolverStack', 'S3_BUCKET_PARAMETER', 'S3_ROOT_KEY_PARAMETER']

logger = logging.getLogger(__name__)

S3_BUCKET_PARAMETER = 'S3DeploymentBucket'
S3_ROOT_KEY_PARAMETER = 'S3DeploymentRootKey'

_LAMBDA_BASIC_EXECUTION = 'arn:${AWS::Partition}:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole'
_SCAN_ACTIONS = ['dynamodb:Scan', 'dynamodb:DescribeTable']


def _assume_role(service: str) -> Dict[str, Any]:
    return {
        'Version': '2012-10-17',
        'Statement': [{
            'Effect': 'Allow',
            'Principal': {'Service': service},
            'Action': 'sts:AssumeRole',
        }],
    }


class CountResolverStack:
    """CloudFormation-style template holding the count resolver infrastructure."""

    def __init__(self, config: Optional[TransformConfig] = None):
        self.config = config or TransformConfig()
        self.name = self.config.stack_name
        self.resources: Dict[str, Dict[str, Any]] = {}
        self.function_id = logical_id(self.config.function_name)
        self.role_id = logical_id(self.config.function_name, 'Role')
        self.data_source_id = logical_id(self.config.data_source_name)
        self.data_source_role_id = logical_id(self.config.data_source_name, 'ServiceRole')

    def add_resource(
        self,
        resource_id: str,
        resource_type: str,
        properties: Dict[str, Any],
        depends_on: Optional[List[str]] = None,
    ) -> bool:
        """Add a resource unless ``resource_id`` is taken.

        Returns:
            True when the resource was added.
        """
        if resource_id in self.resources:
            return False
        resource: Dict[str, Any] = {'Type': resource_type, 'Properties': properties}
        if depends_on:
            resource['DependsOn'] = list(depends_on)
        self.resources[resource_id] = resource
        return True

    def provision_executor(self) -> None:
        """Add the shared executor function, its role and its data source."""
        cfg = self.config
        self.add_resource(self.role_id, 'AWS::IAM::Role', {
            'AssumeRolePolicyDocument': _assume_role('lambda.amazonaws.com'),
            'ManagedPolicyArns': [{'Fn::Sub': _LAMBDA_BASIC_EXECUTION}],
        })
        function_props: Dict[str, Any] = {
            'Code': {
                'S3Bucket': {'Ref': S3_BUCKET_PARAMETER},
                'S3Key': {'Fn::Join': ['/', [{'Ref': S3_ROOT_KEY_PARAMETER}, cfg.code_s3_key]]},
            },
            'Handler': cfg.handler,
            'Runtime': cfg.runtime,
            'MemorySize': cfg.memory_size,
            'Timeout': cfg.timeout,
            'Role': {'Fn::GetAtt': [self.role_id, 'Arn']},
        }
        if cfg.environment:
            function_props['Environment'] = {'Variables': dict(cfg.environment)}
        added = self.add_resource(self.function_id, 'AWS::Lambda::Function', function_props, [self.role_id])
        self.add_resource(self.data_source_role_id, 'AWS::IAM::Role', {
            'AssumeRolePolicyDocument': _assume_role('appsync.amazonaws.com'),
            'Policies': [{
                'PolicyName': 'InvokeCountResolver',
                'PolicyDocument': {
                    'Version': '2012-10-17',
                    'Statement': [{
                        'Effect': 'Allow',
                        'Action': ['lambda:InvokeFunction'],
                        'Resource': [{'Fn::GetAtt': [self.function_id, 'Arn']}],
                    }],
                },
            }],
        })
        self.add_resource(self.data_source_id, 'AWS::AppSync::DataSource', {
            'ApiId': {'Ref': API_ID_PARAMETER},
            'Name': cfg.data_source_name,
            'Type': 'AWS_LAMBDA',
            'LambdaConfig': {'LambdaFunctionArn': {'Fn::GetAtt': [self.function_id, 'Arn']}},
            'ServiceRoleArn': {'Fn::GetAtt': [self.data_source_role_id, 'Arn']},
        }, [self.data_source_role_id])
        if added:
            logger.info("Provisioned shared count executor %s", cfg.function_name)

    def grant_scan(self, table: TableReference, index_name: Optional[str] = None) -> str:
        """Allow the executor to scan ``table`` (and ``index_name`` when given)."""
        policy_id = logical_id(self.config.function_name, 'Scan', table.type_name, 'Policy')
        arn = table.arn(index_name) if index_name else table.arn()
        self.add_resource(policy_id, 'AWS::IAM::Policy', {
            'PolicyName': f"{self.config.function_name}Scan{table.type_name}",
            'Roles': [{'Ref': self.role_id}],
            'PolicyDocument': {
                'Version': '2012-10-17',
                'Statement': [{'Effect': 'Allow', 'Action': list(_SCAN_ACTIONS), 'Resource': []}],
            },
        })
        resources = self.resources[policy_id]['Properties']['PolicyDocument']['Statement'][0]['Resource']
        if arn not in resources:
            resources.append(arn)
        return policy_id

    def add_resolver(self, binding: ResolverBinding) -> str:
        resolver_id = logical_id(binding.type_name, binding.field_name, 'Resolver')
        if binding.request is None or binding.response is None:
            raise ValueError(f"Binding {binding.type_name}.{binding.field_name} has no transforms attached")
        self.add_resource(resolver_id, 'AWS::AppSync::Resolver', {
            'ApiId': {'Ref': API_ID_PARAMETER},
            'TypeName': binding.type_name,
            'FieldName': binding.field_name,
            'Kind': 'UNIT',
            'DataSourceName': {'Fn::GetAtt': [self.data_source_id, 'Name']},
            'RequestMappingTemplate': binding.request.render_cfn(binding.table.name()),
            'ResponseMappingTemplate': binding.response.render(),
        }, [self.data_source_id])
        return resolver_id

    def build(self, registry: BindingRegistry) -> 'CountResolverStack':
        self.provision_executor()
        for binding in registry:
            self.grant_scan(binding.table, binding.index_name)
            self.add_resolver(binding)
        logger.info("Built %s with %d resolver(s)", self.name, self.count_resources('AWS::AppSync::Resolver'))
        return self

    def count_resources(self, resource_type: str) -> int:
        return sum(1 for r in self.resources.values() if r['Type'] == resource_type)

    def to_template(self) -> Dict[str, Any]:
        return {
            'AWSTemplateFormatVersion': '2010-09-09',
            'Description': 'Count resolvers generated by countql',
            'Parameters': {
                API_ID_PARAMETER: {'Type': 'String'},
                ENV_PARAMETER: {'Type': 'String'},
                S3_BUCKET_PARAMETER: {'Type': 'String'},
                S3_ROOT_KEY_PARAMETER: {'Type': 'String'},
            },
            'Resources': self.resources,
            'Outputs': {
                'CountResolverFunctionArn': {'Value': {'Fn::GetAtt': [self.function_id, 'Arn']}},
            },
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_template(), indent=indent)

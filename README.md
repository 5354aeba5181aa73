# osdtool

Building blocks for site reliability work on managed OpenShift clusters.
Python 3.10 or later is required; the only runtime dependency is `semver`.

| Module | What it holds |
| --- | --- |
| `osdtool.servicelog_models` | `Message`, `GoodReply`, `BadReply`, `ClustersFile` and the list/short reply records |
| `osdtool.servicelog_validate` | `validate_good_response`, `validate_bad_response`, `ResponseValidationError` |
| `osdtool.servicelog_post` | `PostCmdOptions` and `PostError` |
| `osdtool.servicelog_list` | `complete` and `build_list_search` |
| `osdtool.support` | `LimitedSupport`, `SupportGoodReply`, `SupportBadReply` |
| `osdtool.verification` | `EgressVerification`, `ClusterInfo`, `ValidateEgressInput`, `ProxyConfig`, `default_validate_egress_input` |
| `osdtool.sts` | `validate_release_version`, `extract_policy`, `policy`, `policy_diff`, `UsageError` |
| `osdtool.org` | `Organization`, `SearchType`, `check_org_id`, `get_search_type`, `get_search_query` |
| `osdtool.org_users` | `UserModel`, `check_roles`, `print_array`, `filter_users` |
| `osdtool.files` | `folder_exists`, `file_exists`, `create_file` |
| `osdtool.network` | `is_online`, `is_valid_url`, `curl_this` |

## Service log templates

```python
from osdtool.servicelog_models import Message

message = Message.from_dict({
    "severity": "Info",
    "service_name": "SREManualAction",
    "summary": "Maintenance on ${CLUSTER_NAME}",
    "description": "Work starts at ${START}.",
    "internal_only": False,
})

message.search_flag("${START}")                  # True
message.replace_with_flag("${START}", "10:00 UTC")
message.find_leftovers()                         # ["${CLUSTER_NAME}"]
message.to_dict()                                # JSON form; empty ids are left out
```

### Preparing a post

`PostCmdOptions` gathers what a service log post needs:

```python
from osdtool.servicelog_post import PostCmdOptions

opts = PostCmdOptions(
    cluster_id="my-cluster",
    template="template.json",          # a local file or a URL
    template_params=["CLUSTER_NAME=prod"],
)
opts.validate()                        # PostError if no cluster is selected
opts.apply_parameters()                # read params, filters, template; fill placeholders
body = opts.build_post_body("cluster-uuid", "cluster-id")
```

`apply_parameters` raises `PostError` for a malformed `NAME=VALUE`, for a
parameter the template and filter files do not use, and for any `${...}`
placeholder left unset (other than `${CLUSTER_UUID}`). Filter files given in
`filter_files` are combined with logical AND into `filters_from_file`.

After each request, `check(status, body, message)` records the outcome in
`successful_clusters` or `failed_clusters`; `post_summary()` returns the
report, and `clean_up(cluster_ids)` marks clusters that were not reached as
failed before returning it.

Replies are checked with `validate_good_response(body, message)` and
`validate_bad_response(body)`; a reply that is not JSON, or that does not
echo the severity, service name, cluster, summary and description that were
sent, raises `ResponseValidationError`.

### Listing

`complete(args)` returns the single cluster identifier (raising
`ValueError` if none is given), and `build_list_search(cluster_id,
external_id, all_messages, internal_messages)` returns the search
parameter, preferring the external id and restricting to `SREManualAction`
messages unless `all_messages` is set.

## Egress verification

`EgressVerification` works out the subnet, security group and proxy
settings for an egress check and returns them as a `ValidateEgressInput`.
With `subnet_id` and `security_group_id` set, no lookups are needed:

```python
from osdtool.verification import EgressVerification

check = EgressVerification(
    subnet_id="subnet-a",
    security_group_id="sg-b",
    region="us-east-2",
    ami_lookup={"us-east-2": "ami-example"},
)
region = check.setup()
egress_input = check.generate_validate_egress_input(region)
```

For a cluster, supply `cluster_id`, a `cluster_lookup` returning a
`ClusterInfo`, and a `client_factory` returning an EC2 client (any object
with boto3-shaped `describe_subnets` and `describe_security_groups`) and a
region. Only AWS clusters of the `rosa`, `osd` and `osdtrial` products are
accepted; a cluster with a proxy and an additional trust bundle needs
`ca_cert`. Failures raise `VerificationError`.

## STS policies

`policy(version)` and `policy_diff(old_version, new_version)` validate the
versions as semantic versions (raising `UsageError`), run
`oc adm release extract ... --credentials-requests --cloud=aws` through
`bash` into `/tmp/crs-<version>`, and for the diff run `diff` on the two
directories and return its output. `oc` and `bash` must be on the `PATH`.

## Organizations

```python
from osdtool.org import check_org_id, get_search_query

check_org_id(["my-org-id"])                      # "my-org-id"
get_search_query("jdoe", "", True)               # "search=username like '%jdoe%'"
get_search_query("", "12345")                    # "search=ebs_account_id='12345'"
```

`check_org_id` raises `ValueError` when no id or more than one is given.
`filter_users` in `osdtool.org_users` attaches roles to `UserModel`s and,
when role names are given, keeps only users holding one of them.

## Files and URLs

```python
from osdtool.files import create_file
from osdtool.network import is_valid_url

is_valid_url("https://example.com/template.json")   # True
is_valid_url("template.json")                        # False
create_file("out/new.txt")                           # makes out/; FileExistsError if present
```

`is_online(url)` returns the status of a 2xx answer (following redirects)
and raises `ConnectionError` otherwise; `curl_this(url)` returns the body of
a 200 answer and empty bytes for any other status.

## What this package does not do

- It has no command-line program; everything here is a library.
- It does not connect to the OpenShift Cluster Manager API or to AWS by
  itself. Requests are built and replies are checked, but sending them,
  authenticating, and creating EC2 clients are left to the caller
  (through `cluster_lookup` and `client_factory` for egress verification).
- It does not run the egress verifier probe; it only prepares its input.
- It does not run packet captures on cluster nodes or create and remove
  emergency SSH jumphosts.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.